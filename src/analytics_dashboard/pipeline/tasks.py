from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from analytics_dashboard.config import AppConfig
from analytics_dashboard.features.deviation import deviation_rows, split_deviation_payload
from analytics_dashboard.features.heatmaps import build_calendar_heatmap, build_day_hour_heatmap
from analytics_dashboard.features.ratios import aggregate_engagement_rate, follow_ratios
from analytics_dashboard.features.velocity import (
    fold_velocity_rows,
    top_series_by_latest,
    velocity_table_rows,
)
from analytics_dashboard.features.wordcloud import normalize_word_weights
from analytics_dashboard.filters import FilterState, engagement_key, engagement_label
from analytics_dashboard.io import endpoints
from analytics_dashboard.io.client import Fetcher, fetch_joined
from analytics_dashboard.io.read import rows_to_frame
from analytics_dashboard.viz import charts, tables
from analytics_dashboard.viz.specs import HeatmapSpec, RenderSpec, WordCloudSpec


@dataclass(frozen=True, slots=True)
class RenderCommand:
    slot: str
    spec: RenderSpec | None


@dataclass(frozen=True)
class LoadContext:
    filters: FilterState
    fetcher: Fetcher
    config: AppConfig

    async def fetch(self, endpoint: endpoints.Endpoint) -> Any:
        return await self.fetcher.fetch_filtered(endpoint, self.filters)


LoadFunction = Callable[[LoadContext], Awaitable[list[RenderCommand]]]


@dataclass(frozen=True, slots=True)
class LoadTask:
    name: str
    slots: tuple[str, ...]
    run: LoadFunction


@dataclass(frozen=True, slots=True)
class TabDefinition:
    id: str
    title: str
    tasks: tuple[LoadTask, ...]
    always_reload: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "always_reload": self.always_reload,
            "tasks": [task.name for task in self.tasks],
            "slots": [slot for task in self.tasks for slot in task.slots],
        }


def _has_rows(payload: Any) -> bool:
    return isinstance(payload, list) and len(payload) > 0


async def load_hashtags(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.HASHTAGS)
    spec = charts.hashtags_chart(rows_to_frame(payload), ctx.filters.mode) if _has_rows(payload) else None
    return [RenderCommand("hashtags_chart", spec)]


async def load_mentions(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.MENTIONS)
    spec = charts.mentions_chart(rows_to_frame(payload), ctx.filters.mode) if _has_rows(payload) else None
    return [RenderCommand("mentions_chart", spec)]


async def load_post_types(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.POST_TYPES)
    spec = (
        charts.post_types_chart(rows_to_frame(payload), ctx.filters.mode)
        if _has_rows(payload)
        else None
    )
    return [RenderCommand("post_types_chart", spec)]


async def load_network_efficiency(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.NETWORKS)
    spec = (
        charts.network_efficiency_chart(rows_to_frame(payload), ctx.filters.mode)
        if _has_rows(payload)
        else None
    )
    return [RenderCommand("network_efficiency_chart", spec)]


async def load_collaborations(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.COLLABORATIONS)
    spec = (
        charts.collaborations_chart(rows_to_frame(payload), ctx.filters.mode)
        if _has_rows(payload)
        else None
    )
    return [RenderCommand("collaborations_chart", spec)]


async def load_engagement_rate(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.ENGAGEMENT_RATE)
    if not isinstance(payload, list):
        return []
    rates = aggregate_engagement_rate(rows_to_frame(payload), ctx.filters.mode)
    return [RenderCommand("engagement_rate_chart", charts.engagement_rate_chart(rates))]


async def load_follow_ratio(ctx: LoadContext) -> list[RenderCommand]:
    # The endpoint is filter-exempt; the client drops the query string for it.
    payload = await ctx.fetch(endpoints.FOLLOW_RATIO)
    spec = charts.follow_ratio_chart(follow_ratios(rows_to_frame(payload))) if _has_rows(payload) else None
    return [RenderCommand("follow_ratio_chart", spec)]


async def load_timing(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.TIME_OF_DAY)
    if payload is None:
        return []
    grid = build_day_hour_heatmap(
        rows_to_frame(payload),
        value_key=engagement_key(ctx.filters.mode),
        label=engagement_label(ctx.filters.mode),
    )
    return [RenderCommand("timing_heatmap", HeatmapSpec(grid) if grid else None)]


async def load_posting_consistency(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.POSTING_CONSISTENCY)
    grid = build_calendar_heatmap(rows_to_frame(payload or []))
    return [RenderCommand("posting_consistency_heatmap", HeatmapSpec(grid) if grid else None)]


async def load_performance_deviation(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.PERFORMANCE_DEVIATION)
    split = split_deviation_payload(payload)
    if split is None:
        return []
    positive, negative = split
    mode = ctx.filters.mode
    return [
        RenderCommand("deviation_positive_table", tables.deviation_table(deviation_rows(positive, mode))),
        RenderCommand("deviation_negative_table", tables.deviation_table(deviation_rows(negative, mode))),
    ]


async def load_engagement_velocity(ctx: LoadContext) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoints.VELOCITY)
    mode = ctx.filters.mode
    if not _has_rows(payload):
        return [
            RenderCommand("velocity_chart", None),
            RenderCommand("velocity_table", tables.velocity_table(velocity_table_rows([], mode), mode)),
        ]
    series = fold_velocity_rows(rows_to_frame(payload), mode)
    top_n = ctx.config.velocity.top_n
    table_frame = velocity_table_rows(series, mode, n=top_n)
    return [
        RenderCommand("velocity_table", tables.velocity_table(table_frame, mode)),
        RenderCommand("velocity_chart", charts.velocity_chart(top_series_by_latest(series, top_n), mode)),
    ]


async def _load_word_cloud(
    ctx: LoadContext,
    endpoint: endpoints.Endpoint,
    slot: str,
    value_key: str,
) -> list[RenderCommand]:
    payload = await ctx.fetch(endpoint)
    if not _has_rows(payload):
        return [RenderCommand(slot, None)]
    width = ctx.config.wordcloud.container_width
    layout = normalize_word_weights(rows_to_frame(payload), value_key, width)
    if layout is None:
        return []
    grid_size = max(1, round(8 * width / 1024))
    return [RenderCommand(slot, WordCloudSpec(layout=layout, grid_size=grid_size))]


async def load_word_cloud_usage(ctx: LoadContext) -> list[RenderCommand]:
    return await _load_word_cloud(ctx, endpoints.WORDCLOUD, "word_cloud", "usage_count")


async def load_word_cloud_engagement(ctx: LoadContext) -> list[RenderCommand]:
    return await _load_word_cloud(
        ctx, endpoints.WORDCLOUD_ENGAGEMENT, "word_cloud_engagement", "avg_engagement"
    )


async def load_website_stats(ctx: LoadContext) -> list[RenderCommand]:
    # Both fetches resolve before either section renders.
    site_payload, pages_payload = await fetch_joined(
        ctx.fetcher, ctx.filters, endpoints.SITE_STATS, endpoints.TOP_PAGES
    )
    site_spec = charts.site_stats_chart(rows_to_frame(site_payload)) if _has_rows(site_payload) else None
    pages_spec = (
        charts.top_pages_chart(rows_to_frame(pages_payload), limit=ctx.config.pages.top_n)
        if _has_rows(pages_payload)
        else None
    )
    return [
        RenderCommand("site_stats_chart", site_spec),
        RenderCommand("top_pages_chart", pages_spec),
    ]


WORDCLOUD_TAB = "wordcloud"

_TAB_DEFINITIONS: tuple[TabDefinition, ...] = (
    TabDefinition(
        id="content",
        title="Content",
        tasks=(
            LoadTask("hashtags", ("hashtags_chart",), load_hashtags),
            LoadTask(
                "performance_deviation",
                ("deviation_positive_table", "deviation_negative_table"),
                load_performance_deviation,
            ),
            LoadTask(
                "engagement_velocity",
                ("velocity_chart", "velocity_table"),
                load_engagement_velocity,
            ),
        ),
    ),
    TabDefinition(
        id="engagement",
        title="Engagement",
        tasks=(
            LoadTask("post_types", ("post_types_chart",), load_post_types),
            LoadTask("network_efficiency", ("network_efficiency_chart",), load_network_efficiency),
            LoadTask("mentions", ("mentions_chart",), load_mentions),
            LoadTask("engagement_rate", ("engagement_rate_chart",), load_engagement_rate),
            LoadTask("follow_ratio", ("follow_ratio_chart",), load_follow_ratio),
            LoadTask("collaborations", ("collaborations_chart",), load_collaborations),
        ),
    ),
    TabDefinition(
        id="timing",
        title="Timing",
        tasks=(
            LoadTask("timing", ("timing_heatmap",), load_timing),
            LoadTask(
                "posting_consistency",
                ("posting_consistency_heatmap",),
                load_posting_consistency,
            ),
        ),
    ),
    TabDefinition(
        id=WORDCLOUD_TAB,
        title="Word Cloud",
        tasks=(
            LoadTask("word_cloud_usage", ("word_cloud",), load_word_cloud_usage),
            LoadTask(
                "word_cloud_engagement",
                ("word_cloud_engagement",),
                load_word_cloud_engagement,
            ),
        ),
        always_reload=True,
    ),
    TabDefinition(
        id="website",
        title="Website",
        tasks=(
            LoadTask("website_stats", ("site_stats_chart", "top_pages_chart"), load_website_stats),
        ),
    ),
)


class TaskRegistry:
    """tab id -> ordered load tasks; the tab controller is generic over this mapping."""

    def __init__(self, definitions: tuple[TabDefinition, ...] | list[TabDefinition]) -> None:
        self._definitions: dict[str, TabDefinition] = {}
        for definition in definitions:
            if definition.id in self._definitions:
                raise ValueError(f"Duplicate tab id: {definition.id}")
            self._definitions[definition.id] = definition

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._definitions

    def tab(self, tab_id: str) -> TabDefinition:
        try:
            return self._definitions[tab_id]
        except KeyError as exc:
            raise KeyError(f"Unknown tab: {tab_id}") from exc

    def tasks_for(self, tab_id: str) -> tuple[LoadTask, ...]:
        return self.tab(tab_id).tasks

    @property
    def tab_ids(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def definitions(self) -> list[dict[str, Any]]:
        return [definition.to_dict() for definition in self._definitions.values()]


def default_task_registry() -> TaskRegistry:
    return TaskRegistry(_TAB_DEFINITIONS)
