"""Per-page feed definitions consumed by the shared pipeline."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Mapping, Optional

from ...config import settings
from .aggregate import KeyFn, by_field, by_folded_field
from .filters import Classifier, by_modality
from .normalize import FieldSpec


class UnknownFeedError(KeyError):
    pass


@dataclass(frozen=True)
class FeedConfig:
    """Everything that differs between dashboard pages."""

    name: str
    label: str
    sheet_range: str
    fields: Mapping[str, FieldSpec]
    identity_field: str
    key_fn: KeyFn
    additive_fields: tuple[str, ...]
    required_fields: tuple[str, ...] = ()
    sort_field: str = "cost"
    cpc_clicks_field: str = "clicks"
    ctr_clicks_field: str = "clicks"
    classify: Optional[Classifier] = None
    # column the classifier reads; when the sheet lacks it the category filter is skipped
    category_field: Optional[str] = None
    page_size: int = 10
    exact_headers: bool = True
    media_platform: Optional[str] = None
    only_identity: Optional[str] = None
    date_field: str = "date"

    @property
    def synonyms(self) -> dict[str, tuple[str, ...]]:
        return {name: spec.names for name, spec in self.fields.items()}


PINTEREST = FeedConfig(
    name="pinterest",
    label="Pinterest creatives",
    sheet_range="Pinterest_tratado",
    fields={
        "date": FieldSpec(("Date", "Data", "Day"), "date"),
        "campaign_name": FieldSpec(("Campaign name", "Campaign")),
        "ad_group_name": FieldSpec(("Ad group name", "Ad group")),
        "ad_name": FieldSpec(("Creative title", "Ad name", "Pin title")),
        "impressions": FieldSpec(("Impressions", "Impr."), "integer"),
        "clicks": FieldSpec(("Clicks", "Link clicks"), "integer"),
        "cost": FieldSpec(("Total spent", "Spend", "Cost"), "number"),
        "reach": FieldSpec(("Reach", "Alcance"), "integer"),
        "results": FieldSpec(("Total engagements", "Engagements", "Results"), "integer"),
        "video_views": FieldSpec(("Video views", "Views"), "integer"),
        "video_views_100": FieldSpec(
            ("Video views at 100%", "Video completions", "Plays at 100%"), "integer"
        ),
    },
    identity_field="ad_name",
    key_fn=by_field("ad_name"),
    additive_fields=(
        "impressions",
        "clicks",
        "cost",
        "reach",
        "results",
        "video_views",
        "video_views_100",
    ),
    required_fields=("date", "ad_name"),
    classify=by_modality("ad_name"),
    category_field="ad_name",
    page_size=10,
    media_platform="pinterest",
)

GOOGLE_SEARCH = FeedConfig(
    name="google_search",
    label="Google Search keywords",
    sheet_range="GoogleSearch_keywords",
    fields={
        "date": FieldSpec(("Date", "Day", "Dia", "Data"), "date"),
        "campaign_name": FieldSpec(("Campaign name", "Campanha")),
        "ad_group_name": FieldSpec(("Ad group name", "Grupo de anúncios")),
        "keyword": FieldSpec(("Keyword", "Search keyword", "Palavra-chave", "Termo de pesquisa")),
        "impressions": FieldSpec(("Impressions", "Impr.", "Impressões"), "integer"),
        "clicks": FieldSpec(("Clicks", "Cliques"), "integer"),
    },
    identity_field="keyword",
    key_fn=by_folded_field("keyword"),
    additive_fields=("impressions", "clicks"),
    required_fields=("keyword",),
    sort_field="impressions",
    page_size=15,
)

META_AD = FeedConfig(
    name="meta_ad",
    label="Meta ads (corrected)",
    sheet_range="Meta_nao_tratado",
    fields={
        "date": FieldSpec(("Date", "Day", "Data"), "date"),
        "ad_name": FieldSpec(("Ad name",)),
        "destination_url": FieldSpec(("External destination URL",)),
        "cost": FieldSpec(("Cost",), "number"),
        "impressions": FieldSpec(("Impressions",), "integer"),
        "link_clicks": FieldSpec(("Link clicks",), "integer"),
    },
    identity_field="ad_name",
    key_fn=by_field("ad_name"),
    additive_fields=("cost", "impressions", "link_clicks"),
    required_fields=("ad_name",),
    cpc_clicks_field="link_clicks",
    ctr_clicks_field="link_clicks",
    classify=by_modality("ad_name"),
    category_field="ad_name",
    page_size=10,
    media_platform="meta",
)

FEEDS: dict[str, FeedConfig] = {feed.name: feed for feed in (PINTEREST, GOOGLE_SEARCH, META_AD)}


def get_feed(name: str) -> FeedConfig:
    try:
        feed = FEEDS[name]
    except KeyError as exc:
        raise UnknownFeedError(name) from exc
    if feed.name == META_AD.name and settings.meta_corrected_ad_name:
        feed = dataclasses.replace(feed, only_identity=settings.meta_corrected_ad_name)
    return feed
