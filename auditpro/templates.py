"""Static report templates.

Each template names a report type and the default checklist labels a new
report of that type starts with.  Templates are configuration, not data:
they are never edited at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .domain_models import ReportTypeKey


@dataclass(slots=True, frozen=True)
class ReportTemplate:
    key: ReportTypeKey
    label: str
    default_criteria: tuple[str, ...]

    @property
    def requires_signatures(self) -> bool:
        return self.key is not ReportTypeKey.VISIT_COMMERCIAL

    @property
    def has_order_section(self) -> bool:
        return self.key is ReportTypeKey.VISIT_COMMERCIAL

    @property
    def is_free_text(self) -> bool:
        return self.key is ReportTypeKey.INTERVENTION_GENERAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key.value,
            "label": self.label,
            "defaultCriteria": [{"label": label} for label in self.default_criteria],
            "requiresSignatures": self.requires_signatures,
            "hasOrderSection": self.has_order_section,
        }


_POOL_CRITERIA: tuple[str, ...] = (
    "Identificação da Piscina",
    "Leitura: Cloro Livre (mg/l)",
    "Leitura: pH",
    "Leitura: Temp. (°C)",
    "Aspiração da Piscina",
    "Limpeza das paredes com escova",
    "Remoção de particulas flutuantes (insetos, folhas etc.)",
    "Limpeza dos cestos do Skimmer",
    "Limpeza do pré-filtro",
    "Tempo de lavagem do pré-filtro (min.)",
    "Lavagem do Filtro de Areia",
    "Adição de Cloro/bromo",
    "Adição de corretor de pH",
    "Adição de algicida",
    "Verificação de Níveis de Reagentes",
    "Verificação de Bombas Doseadoras",
)

_PEST_CONTROL_CRITERIA: tuple[str, ...] = (
    # visit type
    "TIPO DE VISITA: Rotina",
    "TIPO DE VISITA: Reclamação",
    "TIPO DE VISITA: Consolidação",
    "TIPO DE VISITA: Inspeção",
    # targets
    "ALVO: Controlo de Roedores",
    "ALVO: Controlo de Rastejantes",
    "ALVO: Controlo de Insetos Voadores",
    "ALVO: Controlo de Aves Urbanas",
    # rodents
    "ROEDORES: Engodo Totalmente Consumido (Indicar estações nas obs)",
    "ROEDORES: Engodo Parcialmente Consumido (Indicar estações nas obs)",
    "ROEDORES: Subs. Elementos de Motorização",
    "ROEDORES: Subs. Engodo em todos os postos",
    "BIOCIDA (Roedores): Talon",
    "BIOCIDA (Roedores): Bromadol Isco",
    "BIOCIDA (Roedores): Vabitox Facum",
    # crawling insects
    "RASTEJANTES: Biocida Solfac 50 EW",
    "RASTEJANTES: Biocida Agita 10 WG",
    "RASTEJANTES: Biocida K-Othrine SC 25",
    "RASTEJANTES: Instalador de Insecto-Caçador",
    "RASTEJANTES: Substituição de Placas",
    # birds
    "AVES: Sistema de Captura",
    "AVES: Pino Dissuador",
    "AVES: Rede Contra Aves",
    # site status
    "Estações deslocadas sem consentimento",
    "Entrega das Fichas de Segurança Biocidas",
    "Entrega pelo cliente da planta do local",
    "Entrega do Manual do Controlo de Pragas",
    "Equipamento/Sistema Danificado",
    "Instruções/Avisos Danificados ou Removidos",
    "Substituição de Instruções/Avisos",
    "Entrega ao cliente de Mapa de Localização de Iscos",
    "Equipamento/Sistema alterado sem consentimento",
)

REPORT_TEMPLATES: dict[ReportTypeKey, ReportTemplate] = {
    template.key: template
    for template in (
        ReportTemplate(
            key=ReportTypeKey.VISIT_COMMERCIAL,
            label="1. Visita Comercial / Prospeção",
            default_criteria=(
                "Apresentação da Empresa e Serviços",
                "Levantamento de Necessidades do Cliente",
                "Análise de Concorrência no Local",
                "Recetividade à Proposta Comercial",
                "Agendamento de Próxima Reunião",
            ),
        ),
        ReportTemplate(
            key=ReportTypeKey.AUDIT_POOL,
            label="2. Relatório de Intervenção (Piscinas)",
            default_criteria=_POOL_CRITERIA,
        ),
        ReportTemplate(
            key=ReportTypeKey.AUDIT_HACCP,
            label="3. Auditoria HACCP (Segurança Alimentar)",
            default_criteria=(
                "Higiene Pessoal dos Manipuladores",
                "Controlo de Temperaturas (Frio/Quente)",
                "Rastreabilidade dos Produtos",
                "Limpeza e Desinfeção de Superfícies",
                "Controlo de Pragas",
                "Gestão de Resíduos",
            ),
        ),
        ReportTemplate(
            key=ReportTypeKey.MAINT_PREV,
            label="4. Manutenção Preventiva Geral",
            default_criteria=(
                "Quadro Elétrico e Disjuntores",
                "Iluminação Interior e Exterior",
                "Sistema de AVAC (Ar Condicionado)",
                "Rede de Águas e Esgotos",
                "Estruturas (Portas, Janelas, Paredes)",
            ),
        ),
        ReportTemplate(
            key=ReportTypeKey.SAFETY_CHECK,
            label="5. Verificação de Segurança (HST)",
            default_criteria=(
                "Extintores (Validade e Acesso)",
                "Sinalética de Emergência",
                "Desobstrução de Saídas de Emergência",
                "Uso de EPIs",
                "Kits de Primeiros Socorros",
            ),
        ),
        ReportTemplate(
            key=ReportTypeKey.PEST_CONTROL,
            label="6. Relatório de Intervenção (Pragas)",
            default_criteria=_PEST_CONTROL_CRITERIA,
        ),
        ReportTemplate(
            key=ReportTypeKey.INTERVENTION_GENERAL,
            label="7. Relatório de Intervenção (Geral)",
            default_criteria=(),
        ),
    )
}


def get_template(key: ReportTypeKey | str) -> ReportTemplate:
    """Return the template for *key*; ``ValueError`` for an unknown key."""
    return REPORT_TEMPLATES[ReportTypeKey(key)]


def template_label(key: ReportTypeKey | str) -> str:
    try:
        return get_template(key).label
    except ValueError:
        return str(key)
