"""Pydantic request/response models for the AuditPro HTTP API.

Field names follow the camelCase JSON contract of the browser client.
Requests are converted into domain objects with ``model_dump()`` followed
by the matching ``from_dict``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_ROLE_PATTERN = "^(Administrador|Comercial|Auditor|Técnico)$"
_PIN_PATTERN = r"^\d{6}$"
_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SessionRequest(BaseModel):
    userId: str = Field(min_length=1)
    pin: str = Field(pattern=_PIN_PATTERN)


class UserRequest(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    role: str = Field(pattern=_ROLE_PATTERN)
    pin: str = Field(pattern=_PIN_PATTERN)
    avatar: str | None = None
    allowedTemplates: list[str] = Field(default_factory=list)


class ClientRequest(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    nif: str = ""
    contactPerson: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    postalCode: str = ""
    locality: str = ""
    county: str = ""
    shopName: str | None = None
    status: str = Field(default="Ativo", pattern="^(Ativo|Inativo)$")
    lastVisitDate: str | None = Field(default=None, pattern=_DATE_PATTERN)
    visitFrequencyDays: int | None = Field(default=None, ge=1, le=3650)
    accountManagerId: str | None = None


class CompanySettingsRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    nif: str = ""
    address: str = ""
    postalCode: str = ""
    locality: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    logoUrl: str | None = None


class CriteriaItemRequest(BaseModel):
    id: str = Field(min_length=1)
    label: str = ""
    status: str | None = Field(default=None, pattern="^(pass|fail|na|unset)$")
    notes: str = ""


class OrderItemRequest(BaseModel):
    id: str = Field(min_length=1)
    productName: str = ""
    # numeric text is accepted and parsed forgivingly
    quantity: float | str | None = 1
    unitPrice: float | str | None = 0
    discount: float | str | None = 0


class OrderRequest(BaseModel):
    items: list[OrderItemRequest] = Field(default_factory=list)
    deliveryConditions: str = ""
    observations: str = ""


class GpsLocationRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ReportDraftRequest(BaseModel):
    """Editor state sent for finalize and preview.

    Without ``reportId`` a new report is created for ``clientId`` and
    ``typeKey``; with it the stored report is opened for editing.
    """

    reportId: str | None = None
    clientId: str | None = None
    typeKey: str | None = None
    date: str | None = Field(default=None, pattern=_DATE_PATTERN)
    startTime: str | None = Field(default=None, pattern=_TIME_PATTERN)
    endTime: str | None = Field(default=None, pattern=_TIME_PATTERN)
    contractNumber: str | None = None
    routeNumber: str | None = None
    summary: str | None = None
    clientObservations: str | None = None
    criteria: list[CriteriaItemRequest] | None = None
    order: OrderRequest | None = None
    auditorSignerName: str | None = None
    auditorSignature: str | None = None
    clientSignerName: str | None = None
    clientSignature: str | None = None
    gpsLocation: GpsLocationRequest | None = None


class ReportRecordRequest(BaseModel):
    """A complete stored report, written as-is."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    clientId: str = Field(min_length=1)
    auditorId: str = Field(min_length=1)
    typeKey: str = Field(min_length=1)
    date: str = Field(pattern=_DATE_PATTERN)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    dbPath: str


class TemplatesResponse(BaseModel):
    templates: list[dict[str, Any]]


class SessionResponse(BaseModel):
    user: dict[str, Any]
    canEditReports: bool


class UsersResponse(BaseModel):
    users: list[dict[str, Any]]


class ClientsResponse(BaseModel):
    clients: list[dict[str, Any]]


class ReportsResponse(BaseModel):
    reports: list[dict[str, Any]]


class EntityResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    syncStatus: str | None = None


class DeleteResponse(BaseModel):
    id: str
    status: str


class FinalizeResponse(BaseModel):
    report: dict[str, Any]
    syncStatus: str | None = None


class EmailIntentResponse(BaseModel):
    to: str
    subject: str
    body: str
    mailtoUrl: str
    attachmentFilename: str | None = None


class CompanySettingsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    syncStatus: str | None = None


class DashboardResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    today: str
    reportsThisMonth: int
    activeClients: int
    recentReports: list[dict[str, Any]]
    clientsDueForVisit: list[dict[str, Any]]
    criteriaTally: dict[str, int]
