"""Startup data: the bootstrap administrator, default company settings and demo data."""

from __future__ import annotations

import logging

from .database import AuditDB
from .domain_models import (
    AuditCriteriaItem,
    Client,
    ClientStatus,
    CompanySettings,
    CriteriaStatus,
    Report,
    ReportStatus,
    ReportTypeKey,
    User,
    UserRole,
)

LOGGER = logging.getLogger(__name__)

BOOTSTRAP_ADMIN_PIN = "123456"

_BLANK_SIGNATURE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"
    "+P+/HgAFhAJ/wlseKgAAAABJRU5ErkJggg=="
)


def default_company_settings() -> CompanySettings:
    return CompanySettings(
        name="AuditPro Solutions, Lda",
        nif="500100200",
        address="Parque Tecnológico, Edifício A",
        postal_code="4000-123",
        locality="Porto",
        email="geral@auditpro.pt",
        phone="222 333 444",
        website="www.auditpro.pt",
    )


def demo_users() -> list[User]:
    return [
        User(
            id="u1",
            name="Ana Silva",
            role=UserRole.ADMIN,
            pin="123456",
            avatar="https://picsum.photos/id/64/100/100",
            allowed_templates=tuple(ReportTypeKey),
        ),
        User(
            id="u2",
            name="Carlos Santos",
            role=UserRole.AUDITOR,
            pin="111111",
            avatar="https://picsum.photos/id/91/100/100",
            allowed_templates=(
                ReportTypeKey.AUDIT_POOL,
                ReportTypeKey.AUDIT_HACCP,
                ReportTypeKey.SAFETY_CHECK,
                ReportTypeKey.PEST_CONTROL,
                ReportTypeKey.INTERVENTION_GENERAL,
            ),
        ),
        User(
            id="u3",
            name="Bruno Dias",
            role=UserRole.COMMERCIAL,
            pin="222222",
            avatar="https://picsum.photos/id/177/100/100",
            allowed_templates=(ReportTypeKey.VISIT_COMMERCIAL,),
        ),
        User(
            id="u4",
            name="Daniela Faria",
            role=UserRole.TECHNICIAN,
            pin="333333",
            avatar="https://picsum.photos/id/237/100/100",
            allowed_templates=(
                ReportTypeKey.AUDIT_POOL,
                ReportTypeKey.MAINT_PREV,
                ReportTypeKey.PEST_CONTROL,
                ReportTypeKey.INTERVENTION_GENERAL,
            ),
        ),
    ]


def demo_clients() -> list[Client]:
    return [
        Client(
            id="c1",
            name="Restaurante O Marisco",
            tax_id="501234567",
            contact_person="Sr. Manuel",
            email="manuel@marisco.pt",
            phone="912345678",
            address="Rua do Mar, 12",
            postal_code="1200-001",
            locality="Lisboa",
            county="Lisboa",
            shop_name="Marisco Chiado",
            last_visit_date="2023-10-15",
            visit_frequency_days=30,
            account_manager_id="u3",
        ),
        Client(
            id="c2",
            name="Hotel Central",
            tax_id="502345678",
            contact_person="Dra. Sofia",
            email="sofia@hotelcentral.pt",
            phone="213456789",
            address="Av. da Liberdade, 200",
            postal_code="1250-100",
            locality="Lisboa",
            county="Lisboa",
            last_visit_date="2023-11-02",
            visit_frequency_days=45,
            account_manager_id="u3",
        ),
        Client(
            id="c3",
            name="Oficina Turbo",
            tax_id="503456789",
            contact_person="Eng. Rui",
            email="rui@turbo.pt",
            phone="934567890",
            address="Zona Industrial, Lote 4",
            postal_code="4400-001",
            locality="Maia",
            county="Maia",
            shop_name="Turbo Norte",
            status=ClientStatus.INACTIVE,
            last_visit_date="2023-08-20",
            visit_frequency_days=60,
        ),
        Client(
            id="c4",
            name="Clube de Natação",
            tax_id="504567890",
            contact_person="Joana",
            email="joana@natacao.pt",
            phone="967890123",
            address="Complexo Desportivo",
            postal_code="3000-111",
            locality="Coimbra",
            county="Coimbra",
            last_visit_date="2023-12-05",
            visit_frequency_days=30,
        ),
    ]


def demo_reports() -> list[Report]:
    return [
        Report(
            id="r1",
            client_id="c1",
            auditor_id="u2",
            type_key=ReportTypeKey.AUDIT_HACCP,
            date="2023-10-15",
            start_time="14:30",
            end_time="16:00",
            client_name="Restaurante O Marisco",
            client_shop_name="Marisco Chiado",
            auditor_name="Carlos Santos",
            type_name="3. Auditoria HACCP (Segurança Alimentar)",
            criteria=[
                AuditCriteriaItem(
                    id="crit1",
                    label="Higiene Pessoal dos Manipuladores",
                    status=CriteriaStatus.PASS,
                    notes="Muito bom",
                ),
                AuditCriteriaItem(
                    id="crit2", label="Controlo de Temperaturas", status=CriteriaStatus.PASS
                ),
                AuditCriteriaItem(
                    id="crit5",
                    label="Gestão de Resíduos",
                    status=CriteriaStatus.FAIL,
                    notes="Contentor exterior aberto.",
                ),
            ],
            summary=(
                "O espaço encontra-se em boas condições gerais. "
                "Recomenda-se atenção à validade de alguns produtos secos."
            ),
            auditor_signer_name="Carlos Santos",
            auditor_signature=_BLANK_SIGNATURE,
            client_signer_name="Sr. Manuel",
            client_signature=_BLANK_SIGNATURE,
            status=ReportStatus.FINALIZED,
        )
    ]


def bootstrap_admin() -> User:
    return User(
        id="admin",
        name="Administrador",
        role=UserRole.ADMIN,
        pin=BOOTSTRAP_ADMIN_PIN,
        allowed_templates=tuple(ReportTypeKey),
    )


def seed_defaults(db: AuditDB) -> bool:
    """Make sure *db* has an administrator and company settings.

    Runs on every start, whatever the demo-data setting, so a fresh
    database can always be managed through the API.  Returns whether
    anything was written.
    """
    wrote = False
    if not any(user.is_admin for user in db.list_users()):
        admin = bootstrap_admin()
        db.upsert_user(admin)
        LOGGER.warning(
            "No administrator found; created user %r with the default PIN. Change it.",
            admin.id,
        )
        wrote = True
    if db.get_company_settings() is None:
        db.set_company_settings(default_company_settings())
        wrote = True
    return wrote


def seed_demo_data(db: AuditDB) -> bool:
    """Insert the demo users, clients and report when *db* is empty.

    Returns whether anything was written.
    """
    if not db.is_empty():
        return False
    for user in demo_users():
        db.upsert_user(user)
    for client in demo_clients():
        db.upsert_client(client)
    for report in demo_reports():
        db.upsert_report(report)
    LOGGER.info("Seeded demo data into %s", db.db_path)
    return True
