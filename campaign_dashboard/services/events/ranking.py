"""Event ranking for the landing pages (GA4 "Eventos Receptivos" sheet)."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..pipeline.columns import NOT_FOUND, resolve_any, resolve_column
from ..pipeline.filters import DateRange
from ..pipeline.normalize import normalize_date, parse_integer
from ..pipeline.table import RawTable

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF = "2025-12-08"

FLOATING = "btn_whatsapp_flutuante"
FLOATING_VIDA = "btn_whatsapp_flutuante_vida"
BOTTOM = "btn_whatsapp_fundo"
BOTTOM_VIDA = "btn_whatsapp_fundo_vida"
INTERNAL_LINK = "internal_link_click"

KNOWN_EVENTS = (
    "cta_quero_contratar_1",
    "cta_quero_contratar_2",
    "querocontratar1_sou_cliente_bb",
    "querocontratar1_nao_sou_cliente_bb",
    "btn_saiba_mais_esquerda",
    "btn_saiba_mais_meio",
    "btn_saiba_mais_direita",
    BOTTOM,
    "cta_quero_contratar_1_vida",
    "cta_quero_contratar_2_vida",
    "querocontratar1_sou_cliente_bb_vida",
    "querocontratar1_nao_sou_cliente_bb_vida",
    "btn_saiba_mais_esquerda_vida",
    "btn_saiba_mais_meio_vida",
    "btn_saiba_mais_direita_vida",
    BOTTOM_VIDA,
    "Button_Canais_Digitais_Footer",
    "Button_Ouv_Footer",
    "Button_SAC_Footer",
    "preenchimento_form",
)


@dataclass
class WhatsAppBuckets:
    """
    Raw material for rebuilding the floating WhatsApp button counts.

    Up to the cutoff date the floating button was not tracked: its clicks
    only show up as generic wa.me link clicks, which also include the
    bottom button. After the cutoff the floating button has its own event.
    """

    wa_me_before: int = 0
    wa_me_vida_before: int = 0
    bottom_before: int = 0
    bottom_vida_before: int = 0
    floating_after: int = 0
    floating_vida_after: int = 0


def correct_floating_whatsapp(buckets: WhatsAppBuckets) -> dict[str, int]:
    """Floating = max(0, wa.me clicks - bottom clicks) before cutoff + tracked clicks after."""
    return {
        FLOATING: max(0, buckets.wa_me_before - buckets.bottom_before) + buckets.floating_after,
        FLOATING_VIDA: max(0, buckets.wa_me_vida_before - buckets.bottom_vida_before)
        + buckets.floating_vida_after,
    }


def count_events(
    table: RawTable,
    date_range: DateRange | None = None,
    modalities: Iterable[str] = (),
    cutoff: str = DEFAULT_CUTOFF,
) -> dict[str, int]:
    """
    Total "Event count" per "Event name" for rows inside the filters, with the
    floating WhatsApp counts rebuilt around `cutoff`.
    """
    headers = table.headers
    date_idx = resolve_column(headers, "Date")
    name_idx = resolve_column(headers, "Event name")
    count_idx = resolve_column(headers, "Event count")
    link_idx = resolve_any(headers, ["Link URL", "Link_URL"])
    modality_idx = resolve_column(headers, "Modalidade")

    if NOT_FOUND in (date_idx, name_idx, count_idx):
        if headers:
            logger.warning("Event sheet is missing Date / Event name / Event count: %s", list(headers)[:15])
        return {}

    date_range = date_range or DateRange()
    selected = {m for m in modalities if m}
    counts: dict[str, int] = dict.fromkeys(KNOWN_EVENTS, 0)
    buckets = WhatsAppBuckets()

    for row in table.rows:
        raw_date = table.cell(row, date_idx)
        if not date_range.contains(raw_date):
            continue
        modality = str(table.cell(row, modality_idx) or "").strip()
        if selected and modality_idx != NOT_FOUND and modality not in selected:
            continue

        name = str(table.cell(row, name_idx) or "").strip()
        count = parse_integer(table.cell(row, count_idx))
        day = normalize_date(raw_date)
        before = day is not None and day <= cutoff

        if name == BOTTOM:
            counts[name] += count
            if before:
                buckets.bottom_before += count
        elif name == BOTTOM_VIDA:
            counts[name] += count
            if before:
                buckets.bottom_vida_before += count
        elif name == FLOATING:
            if not before:
                buckets.floating_after += count
        elif name == FLOATING_VIDA:
            if not before:
                buckets.floating_vida_after += count
        elif name == INTERNAL_LINK and before:
            # only the wa.me links are used from this period; the rest are not counted
            url = str(table.cell(row, link_idx) or "").lower()
            if "wa.me" in url:
                if modality == "Vida":
                    buckets.wa_me_vida_before += count
                else:
                    buckets.wa_me_before += count
        elif name:
            counts[name] = counts.get(name, 0) + count

    counts.update(correct_floating_whatsapp(buckets))
    return counts


@dataclass
class EventItem:
    id: str
    label: str
    count: int
    children: list["EventItem"] = field(default_factory=list)

    @property
    def has_activity(self) -> bool:
        return self.count > 0 or any(c.count > 0 for c in self.children)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "label": self.label, "count": self.count}
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


def _item(counts: dict[str, int], event_id: str, label: str, children: Optional[list[EventItem]] = None) -> EventItem:
    return EventItem(id=event_id, label=label, count=counts.get(event_id, 0), children=children or [])


def _category(category_id: str, label: str, items: list[EventItem]) -> dict[str, Any]:
    active = [i for i in items if i.has_activity]
    active.sort(key=lambda i: i.count, reverse=True)
    return {"id": category_id, "label": label, "items": [i.to_dict() for i in active]}


def rank_event_categories(counts: dict[str, int]) -> list[dict[str, Any]]:
    """Group event counts into the ranking categories; empty categories are left out."""
    c = counts
    conversion = [
        _item(
            c,
            "cta_quero_contratar_1",
            "Quero Contratar 1 (Residencial)",
            [
                _item(c, "querocontratar1_sou_cliente_bb", "Sou Cliente BB"),
                _item(c, "querocontratar1_nao_sou_cliente_bb", "Não Sou Cliente"),
            ],
        ),
        _item(c, "cta_quero_contratar_2", "Quero Contratar 2 (Residencial)"),
        _item(
            c,
            "cta_quero_contratar_1_vida",
            "Quero Contratar 1 (Vida)",
            [
                _item(c, "querocontratar1_sou_cliente_bb_vida", "Sou Cliente BB (Vida)"),
                _item(c, "querocontratar1_nao_sou_cliente_bb_vida", "Não Sou Cliente (Vida)"),
            ],
        ),
        _item(c, "cta_quero_contratar_2_vida", "Quero Contratar 2 (Vida)"),
    ]
    whatsapp = [
        _item(c, FLOATING, "WhatsApp Flutuante"),
        _item(c, BOTTOM, "WhatsApp Fundo"),
        _item(c, FLOATING_VIDA, "WhatsApp Flutuante (Vida)"),
        _item(c, BOTTOM_VIDA, "WhatsApp Fundo (Vida)"),
    ]
    engagement = [
        _item(c, "btn_saiba_mais_esquerda", "Saiba Mais (Esq)"),
        _item(c, "btn_saiba_mais_meio", "Saiba Mais (Meio)"),
        _item(c, "btn_saiba_mais_direita", "Saiba Mais (Dir)"),
        _item(c, "btn_saiba_mais_esquerda_vida", "Saiba Mais (Esq - Vida)"),
        _item(c, "btn_saiba_mais_meio_vida", "Saiba Mais (Meio - Vida)"),
        _item(c, "btn_saiba_mais_direita_vida", "Saiba Mais (Dir - Vida)"),
        _item(c, "clique_header_planos", "Header: Planos"),
        _item(c, "clique_header_coberturas", "Header: Coberturas"),
        _item(c, "clique_header_depoimentos", "Header: Depoimentos"),
        _item(c, "clique_header_faq", "Header: FAQ"),
        _item(c, "clique_header_planos_vida", "Header: Planos (Vida)"),
        _item(c, "clique_header_coberturas_vida", "Header: Coberturas (Vida)"),
        _item(c, "clique_header_depoimentos_vida", "Header: Depoimentos (Vida)"),
        _item(c, "clique_header_faq_vida", "Header: FAQ (Vida)"),
    ]
    faq = [
        _item(c, k, k.replace("btn_faq_", "FAQ: ", 1).replace("_", " "))
        for k in c
        if k.startswith("btn_faq_")
    ]
    social = [
        _item(c, k, k.replace("clique_", "Social: ", 1).replace("_", " "))
        for k in c
        if k.startswith("clique_") and "header" not in k
    ]
    other = [
        _item(c, "Button_Canais_Digitais_Footer", "Footer: Canais Digitais"),
        _item(c, "Button_Ouv_Footer", "Footer: Ouvidoria"),
        _item(c, "Button_SAC_Footer", "Footer: SAC"),
        _item(c, "preenchimento_form", "Preenchimento Formulário"),
    ]

    categories = [
        _category("conversao", "Conversão Principal", conversion),
        _category("whatsapp", "WhatsApp", whatsapp),
        _category("engajamento", "Engajamento e Navegação", engagement),
        _category("faq", "Dúvidas (FAQ)", faq),
        _category("social", "Redes Sociais", social),
        _category("outros", "Outros / Institucional", other),
    ]
    return [cat for cat in categories if cat["items"]]


def modality_values(table: RawTable) -> list[str]:
    idx = resolve_column(table.headers, "Modalidade")
    if idx == NOT_FOUND:
        return []
    return sorted({str(v).strip() for v in (table.cell(r, idx) for r in table.rows) if v and str(v).strip()})
