"""GA4 event ranking and traffic summaries."""

from .ranking import (
    DEFAULT_CUTOFF,
    WhatsAppBuckets,
    correct_floating_whatsapp,
    count_events,
    rank_event_categories,
    modality_values,
)
from .traffic import (
    SOURCE_HEADERS,
    REGION_HEADERS,
    sessions_by_source,
    cta_summary,
    distinct_values,
    normalize_region,
    platform_color,
)

__all__ = [
    "DEFAULT_CUTOFF",
    "WhatsAppBuckets",
    "correct_floating_whatsapp",
    "count_events",
    "rank_event_categories",
    "modality_values",
    "SOURCE_HEADERS",
    "REGION_HEADERS",
    "sessions_by_source",
    "cta_summary",
    "distinct_values",
    "normalize_region",
    "platform_color",
]
