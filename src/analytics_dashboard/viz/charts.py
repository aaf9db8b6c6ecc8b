from __future__ import annotations

from typing import Any

import pandas as pd

from analytics_dashboard.features.formatting import format_number
from analytics_dashboard.features.ranking import rank_by_metric, top_n
from analytics_dashboard.features.ratios import BUBBLE_RADIUS
from analytics_dashboard.features.velocity import PostVelocitySeries, series_label
from analytics_dashboard.filters import MetricMode, engagement_key, engagement_label
from analytics_dashboard.io.read import numeric_column
from analytics_dashboard.viz import palette
from analytics_dashboard.viz.specs import ChartSpec


def _legend() -> dict[str, Any]:
    return {"legend": {"labels": {"usePointStyle": True, "padding": 20}}}


def _dual_axis(left_title: str, right_title: str) -> dict[str, Any]:
    return {
        "y": {"position": "left", "title": {"display": True, "text": left_title}},
        "y1": {
            "position": "right",
            "title": {"display": True, "text": right_title},
            "grid": {"drawOnChartArea": False},
        },
    }


def _values(frame: pd.DataFrame, column: str) -> list[float]:
    return numeric_column(frame, column).tolist()


def _labels(frame: pd.DataFrame, column: str) -> list[str]:
    if column not in frame.columns:
        return [""] * len(frame)
    return frame[column].fillna("").astype(str).tolist()


def _metric_with_count_line(
    frame: pd.DataFrame,
    mode: MetricMode,
    label_column: str,
    count_column: str,
    count_label: str,
    metric_label: str,
    right_title: str,
) -> ChartSpec | None:
    if frame.empty:
        return None
    key = engagement_key(mode)
    ranked = rank_by_metric(frame, key)
    return ChartSpec(
        kind="bar",
        labels=tuple(_labels(ranked, label_column)),
        datasets=(
            {
                "label": metric_label,
                "data": _values(ranked, key),
                "backgroundColor": palette.PRIMARY,
                "yAxisID": "y",
                "order": 2,
            },
            {
                "label": count_label,
                "data": _values(ranked, count_column),
                "type": "line",
                "borderColor": palette.ACCENT,
                "backgroundColor": palette.ACCENT,
                "yAxisID": "y1",
                "order": 1,
            },
        ),
        options={
            "scales": _dual_axis(engagement_label(mode), right_title),
            "plugins": _legend(),
        },
    )


def hashtags_chart(frame: pd.DataFrame, mode: MetricMode) -> ChartSpec | None:
    if frame.empty:
        return None
    key = engagement_key(mode)
    label = engagement_label(mode)
    ranked = rank_by_metric(frame, key)
    return ChartSpec(
        kind="bar",
        labels=tuple(_labels(ranked, "tag")),
        datasets=(
            {
                "label": "Usage Count",
                "data": _values(ranked, "usage_count"),
                "backgroundColor": palette.PRIMARY,
                "yAxisID": "y",
            },
            {
                "label": label,
                "data": _values(ranked, key),
                "backgroundColor": palette.PRIMARY_LIGHT,
                "yAxisID": "y1",
            },
        ),
        options={"scales": _dual_axis("Posts Count", label), "plugins": _legend()},
    )


def mentions_chart(frame: pd.DataFrame, mode: MetricMode) -> ChartSpec | None:
    label = engagement_label(mode)
    return _metric_with_count_line(
        frame,
        mode,
        label_column="mention",
        count_column="usage_count",
        count_label="Usage Count",
        metric_label=label,
        right_title="Usage Count",
    )


def network_efficiency_chart(frame: pd.DataFrame, mode: MetricMode) -> ChartSpec | None:
    label = engagement_label(mode)
    spec = _metric_with_count_line(
        frame,
        mode,
        label_column="network",
        count_column="post_count",
        count_label="Post Count",
        metric_label=f"{label} per Post",
        right_title="Post Count",
    )
    if spec is None:
        return None
    return ChartSpec(
        kind=spec.kind,
        labels=spec.labels,
        datasets=spec.datasets,
        options={"indexAxis": "x", **spec.options},
    )


def collaborations_chart(frame: pd.DataFrame, mode: MetricMode) -> ChartSpec | None:
    return _metric_with_count_line(
        frame,
        mode,
        label_column="collaborator",
        count_column="collaboration_count",
        count_label="Collaboration Count",
        metric_label=engagement_label(mode),
        right_title="Count",
    )


def post_types_chart(frame: pd.DataFrame, mode: MetricMode) -> ChartSpec | None:
    if frame.empty:
        return None
    key = engagement_key(mode)
    metric_label = engagement_label(mode).lower()
    labels = [f" {value}" for value in _labels(frame, "post_type")]
    values = _values(frame, key)
    counts = numeric_column(frame, "post_count").tolist()
    tooltips = [
        f"{label}: {format_number(value)} {metric_label} ({format_number(count)} posts)"
        for label, value, count in zip(labels, values, counts)
    ]
    return ChartSpec(
        kind="doughnut",
        labels=tuple(labels),
        datasets=({"data": values, "backgroundColor": list(palette.HIGH_CONTRAST)},),
        options={
            "plugins": {
                "legend": {"position": "right", "labels": {"padding": 20, "usePointStyle": True}},
                "tooltip": {"labels": tooltips},
            },
            "layout": {"padding": 20},
        },
    )


def engagement_rate_chart(rates: pd.DataFrame) -> ChartSpec | None:
    if rates.empty:
        return None
    networks = _labels(rates, "network")
    bubbles = [
        {"x": network, "y": float(rate), "r": BUBBLE_RADIUS}
        for network, rate in zip(networks, rates["rate"].tolist())
    ]
    colors = [palette.cycle_color(index) for index in range(len(networks))]
    return ChartSpec(
        kind="bubble",
        datasets=(
            {
                "label": "Avg Engagement Rate",
                "data": bubbles,
                "backgroundColor": colors,
                "borderColor": colors,
            },
        ),
        options={
            "scales": {
                "x": {
                    "type": "category",
                    "labels": networks,
                    "title": {"display": True, "text": "Network"},
                    "offset": True,
                },
                "y": {
                    "title": {"display": True, "text": "Avg Engagement Rate (%)"},
                    "beginAtZero": True,
                },
            },
            "plugins": {
                **_legend(),
                "tooltip": {
                    "labels": [f"{bubble['x']}: {bubble['y']:.3f}%" for bubble in bubbles]
                },
            },
        },
    )


def follow_ratio_chart(ratios: pd.DataFrame) -> ChartSpec | None:
    if ratios.empty:
        return None
    return ChartSpec(
        kind="bar",
        labels=tuple(_labels(ratios, "network")),
        datasets=(
            {
                "label": "Follow Ratio (Followers/Following)",
                "data": _values(ratios, "ratio"),
                "backgroundColor": palette.PRIMARY,
                "order": 2,
            },
            {
                "label": "Target",
                "data": _values(ratios, "target"),
                "type": "line",
                "borderColor": palette.REFERENCE_LINE,
                "pointRadius": 0,
                "fill": False,
                "order": 1,
            },
        ),
        options={
            "scales": {"y": {"beginAtZero": True, "title": {"display": True, "text": "Ratio"}}},
            "plugins": _legend(),
        },
    )


def site_stats_chart(frame: pd.DataFrame) -> ChartSpec | None:
    if frame.empty:
        return None
    return ChartSpec(
        kind="line",
        labels=tuple(_labels(frame, "date_str")),
        datasets=(
            {
                "label": "Visitors",
                "data": _values(frame, "total_visitors"),
                "borderColor": palette.PRIMARY,
                "backgroundColor": palette.PRIMARY_FILL,
                "fill": True,
                "yAxisID": "y",
            },
            {
                "label": "Avg Session (s)",
                "data": _values(frame, "avg_session_duration"),
                "borderColor": palette.PRIMARY_LIGHT,
                "borderDash": [5, 5],
                "yAxisID": "y1",
            },
        ),
        options={"scales": _dual_axis("Visitors", "Seconds"), "plugins": _legend()},
    )


def top_pages_chart(frame: pd.DataFrame, limit: int = 15) -> ChartSpec | None:
    if frame.empty:
        return None
    pages = top_n(frame, limit)
    return ChartSpec(
        kind="bar",
        labels=tuple(_labels(pages, "url_path")),
        datasets=(
            {
                "label": "Total Views",
                "data": _values(pages, "total_views"),
                "backgroundColor": palette.PRIMARY,
            },
        ),
        options={"indexAxis": "y", "plugins": _legend()},
    )


def velocity_chart(series: list[PostVelocitySeries], mode: MetricMode) -> ChartSpec | None:
    if not series:
        return None
    datasets = tuple(
        {
            "label": series_label(rank, item),
            "data": [{"x": hours, "y": value} for hours, value in item.points()],
            "borderColor": palette.cycle_color(rank - 1),
            "backgroundColor": "transparent",
            "tension": 0.4,
        }
        for rank, item in enumerate(series, start=1)
    )
    y_title = "Total Views" if mode == MetricMode.views else "Total Engagement"
    return ChartSpec(
        kind="line",
        datasets=datasets,
        options={
            "scales": {
                "x": {"type": "linear", "title": {"display": True, "text": "Hours since posted"}},
                "y": {"title": {"display": True, "text": y_title}},
            },
            "plugins": _legend(),
        },
    )
