"""Domain model objects for the AuditPro backend.

Typed dataclasses for users, clients, reports, orders and company settings.
The external JSON contract (API payloads, stored blobs) keeps the camelCase
keys used by the browser client; ``from_dict``/``to_dict`` translate at the
boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class UserRole(StrEnum):
    ADMIN = "Administrador"
    COMMERCIAL = "Comercial"
    AUDITOR = "Auditor"
    TECHNICIAN = "Técnico"


class ReportTypeKey(StrEnum):
    VISIT_COMMERCIAL = "visit_comercial"
    AUDIT_POOL = "audit_pool"
    AUDIT_HACCP = "audit_haccp"
    MAINT_PREV = "maint_prev"
    SAFETY_CHECK = "safety_check"
    PEST_CONTROL = "pest_control"
    INTERVENTION_GENERAL = "intervention_general"


class CriteriaStatus(StrEnum):
    PASS = "pass"
    FAIL = "fail"
    NA = "na"
    UNSET = "unset"


class ClientStatus(StrEnum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


class ReportStatus(StrEnum):
    DRAFT = "Rascunho"
    FINALIZED = "Finalizado"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def coerce_number(value: object) -> float:
    """Parse a user-entered number, returning 0 for anything unusable.

    Accepts ints, floats and numeric text (a decimal comma is read as a
    decimal point).  Empty, malformed or non-finite input becomes ``0.0``.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        out = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return 0.0
        try:
            out = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def compute_line_total(quantity: float, unit_price: float, discount_percent: float) -> float:
    return quantity * unit_price * (1 - discount_percent / 100)


def _str_or_none(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_int_or_none(value: object) -> int | None:
    if value in (None, ""):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return int(round(out))


def parse_enum(enum_cls: type[StrEnum], value: object, default: StrEnum) -> Any:
    """Return the enum member for *value* (by value or member name) or *default*."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    text = str(value).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    return default


# ---------------------------------------------------------------------------
# 1) User
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class User:
    id: str
    name: str
    role: UserRole
    pin: str
    avatar: str | None = None
    allowed_templates: tuple[ReportTypeKey, ...] = ()

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def can_use_template(self, key: ReportTypeKey | str) -> bool:
        return ReportTypeKey(key) in self.allowed_templates

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        allowed: list[ReportTypeKey] = []
        for raw in data.get("allowedTemplates") or ():
            try:
                key = ReportTypeKey(str(raw))
            except ValueError:
                continue
            if key not in allowed:
                allowed.append(key)
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or "").strip(),
            role=parse_enum(UserRole, data.get("role"), UserRole.TECHNICIAN),
            pin=str(data.get("pin") or ""),
            avatar=_str_or_none(data.get("avatar")),
            allowed_templates=tuple(allowed),
        )

    def to_dict(self, *, include_pin: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "avatar": self.avatar,
            "allowedTemplates": [key.value for key in self.allowed_templates],
        }
        if include_pin:
            out["pin"] = self.pin
        return out


# ---------------------------------------------------------------------------
# 2) Client
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Client:
    id: str
    name: str
    tax_id: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    postal_code: str = ""
    locality: str = ""
    county: str = ""
    shop_name: str | None = None
    status: ClientStatus = ClientStatus.ACTIVE
    last_visit_date: str | None = None
    visit_frequency_days: int | None = None
    account_manager_id: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status is ClientStatus.ACTIVE

    def postal_line(self) -> str:
        """``<postal code> <locality>, <county>`` with empty parts dropped."""
        head = " ".join(part for part in (self.postal_code, self.locality) if part)
        return ", ".join(part for part in (head, self.county) if part)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Client:
        frequency = _as_int_or_none(data.get("visitFrequencyDays", data.get("visitFrequency")))
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or "").strip(),
            tax_id=str(data.get("nif", data.get("taxId")) or "").strip(),
            contact_person=str(data.get("contactPerson") or ""),
            email=str(data.get("email") or "").strip(),
            phone=str(data.get("phone") or "").strip(),
            address=str(data.get("address") or ""),
            postal_code=str(data.get("postalCode") or ""),
            locality=str(data.get("locality") or ""),
            county=str(data.get("county") or ""),
            shop_name=_str_or_none(data.get("shopName")),
            status=parse_enum(ClientStatus, data.get("status"), ClientStatus.ACTIVE),
            last_visit_date=_str_or_none(data.get("lastVisitDate", data.get("lastVisit"))),
            visit_frequency_days=frequency if frequency and frequency > 0 else None,
            account_manager_id=_str_or_none(data.get("accountManagerId")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nif": self.tax_id,
            "contactPerson": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "postalCode": self.postal_code,
            "locality": self.locality,
            "county": self.county,
            "shopName": self.shop_name,
            "status": self.status.value,
            "lastVisitDate": self.last_visit_date,
            "visitFrequencyDays": self.visit_frequency_days,
            "accountManagerId": self.account_manager_id,
        }


# ---------------------------------------------------------------------------
# 3) Checklist and order lines
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AuditCriteriaItem:
    id: str
    label: str
    status: CriteriaStatus = CriteriaStatus.UNSET
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditCriteriaItem:
        return cls(
            id=str(data["id"]),
            label=str(data.get("label") or ""),
            status=parse_enum(CriteriaStatus, data.get("status"), CriteriaStatus.UNSET),
            notes=str(data.get("notes") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            # unset travels as null on the wire
            "status": None if self.status is CriteriaStatus.UNSET else self.status.value,
            "notes": self.notes,
        }


@dataclass(slots=True)
class OrderItem:
    id: str
    product_name: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    discount_percent: float = 0.0

    @property
    def line_total(self) -> float:
        return compute_line_total(self.quantity, self.unit_price, self.discount_percent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderItem:
        return cls(
            id=str(data["id"]),
            product_name=str(data.get("productName") or ""),
            quantity=coerce_number(data.get("quantity")),
            unit_price=coerce_number(data.get("unitPrice")),
            discount_percent=coerce_number(data.get("discount", data.get("discountPercent"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "discount": self.discount_percent,
            "lineTotal": self.line_total,
        }


@dataclass(slots=True)
class Order:
    items: list[OrderItem] = field(default_factory=list)
    delivery_conditions: str = ""
    observations: str = ""

    @property
    def total_value(self) -> float:
        return sum(item.line_total for item in self.items)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order | None:
        """Parse a stored order; a stored ``totalValue`` is ignored.

        Returns ``None`` when the payload has no items.
        """
        items = [
            OrderItem.from_dict(raw) for raw in data.get("items") or () if isinstance(raw, dict)
        ]
        if not items:
            return None
        return cls(
            items=items,
            delivery_conditions=str(data.get("deliveryConditions") or ""),
            observations=str(data.get("observations") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "deliveryConditions": self.delivery_conditions,
            "observations": self.observations,
            "totalValue": self.total_value,
        }


@dataclass(slots=True, frozen=True)
class GpsLocation:
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: object) -> GpsLocation | None:
        if not isinstance(data, dict):
            return None
        try:
            lat = float(data["lat"])
            lng = float(data["lng"])
        except (KeyError, TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            return None
        return cls(lat=lat, lng=lng)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def display(self) -> str:
        return f"{self.lat:.5f}, {self.lng:.5f}"


# ---------------------------------------------------------------------------
# 4) Report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Report:
    id: str
    client_id: str
    auditor_id: str
    type_key: ReportTypeKey
    date: str
    start_time: str = ""
    end_time: str = ""
    client_name: str = ""
    client_shop_name: str | None = None
    auditor_name: str = ""
    type_name: str = ""
    contract_number: str | None = None
    route_number: str | None = None
    criteria: list[AuditCriteriaItem] = field(default_factory=list)
    summary: str = ""
    client_observations: str | None = None
    order: Order | None = None
    auditor_signer_name: str = ""
    auditor_signature: str | None = None
    client_signer_name: str = ""
    client_signature: str | None = None
    gps_location: GpsLocation | None = None
    status: ReportStatus = ReportStatus.FINALIZED

    @property
    def is_commercial_visit(self) -> bool:
        return self.type_key is ReportTypeKey.VISIT_COMMERCIAL

    @property
    def has_order(self) -> bool:
        return self.order is not None and bool(self.order.items)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Build a report from its JSON form.

        Raises ``ValueError`` for an unknown ``typeKey`` and ``KeyError``
        when ``id``, ``clientId`` or ``auditorId`` is missing.
        """
        raw_order = data.get("order")
        return cls(
            id=str(data["id"]),
            client_id=str(data["clientId"]),
            auditor_id=str(data["auditorId"]),
            type_key=ReportTypeKey(str(data.get("typeKey") or "")),
            date=str(data.get("date") or ""),
            start_time=str(data.get("startTime") or ""),
            end_time=str(data.get("endTime") or ""),
            client_name=str(data.get("clientName") or ""),
            client_shop_name=_str_or_none(data.get("clientShopName")),
            auditor_name=str(data.get("auditorName") or ""),
            type_name=str(data.get("typeName") or ""),
            contract_number=_str_or_none(data.get("contractNumber")),
            route_number=_str_or_none(data.get("routeNumber")),
            criteria=[
                AuditCriteriaItem.from_dict(raw)
                for raw in data.get("criteria") or ()
                if isinstance(raw, dict)
            ],
            summary=str(data.get("summary") or ""),
            client_observations=_str_or_none(data.get("clientObservations")),
            order=Order.from_dict(raw_order) if isinstance(raw_order, dict) else None,
            auditor_signer_name=str(data.get("auditorSignerName") or ""),
            auditor_signature=_str_or_none(data.get("auditorSignature")),
            client_signer_name=str(data.get("clientSignerName") or ""),
            client_signature=_str_or_none(data.get("clientSignature")),
            gps_location=GpsLocation.from_dict(data.get("gpsLocation")),
            status=parse_enum(ReportStatus, data.get("status"), ReportStatus.FINALIZED),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "clientName": self.client_name,
            "clientShopName": self.client_shop_name,
            "auditorId": self.auditor_id,
            "auditorName": self.auditor_name,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "contractNumber": self.contract_number,
            "routeNumber": self.route_number,
            "typeKey": self.type_key.value,
            "typeName": self.type_name,
            "criteria": [item.to_dict() for item in self.criteria],
            "summary": self.summary,
            "clientObservations": self.client_observations,
            "order": self.order.to_dict() if self.order is not None else None,
            "auditorSignerName": self.auditor_signer_name,
            "auditorSignature": self.auditor_signature,
            "clientSignerName": self.client_signer_name,
            "clientSignature": self.client_signature,
            "gpsLocation": self.gps_location.to_dict() if self.gps_location else None,
            "status": self.status.value,
        }


# ---------------------------------------------------------------------------
# 5) CompanySettings
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CompanySettings:
    name: str
    nif: str = ""
    address: str = ""
    postal_code: str = ""
    locality: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    logo_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompanySettings:
        return cls(
            name=str(data.get("name") or "").strip(),
            nif=str(data.get("nif") or "").strip(),
            address=str(data.get("address") or ""),
            postal_code=str(data.get("postalCode") or ""),
            locality=str(data.get("locality") or ""),
            email=str(data.get("email") or "").strip(),
            phone=str(data.get("phone") or "").strip(),
            website=str(data.get("website") or "").strip(),
            logo_url=_str_or_none(data.get("logoUrl")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "nif": self.nif,
            "address": self.address,
            "postalCode": self.postal_code,
            "locality": self.locality,
            "email": self.email,
            "phone": self.phone,
            "website": self.website,
            "logoUrl": self.logo_url,
        }
