from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from analytics_dashboard.features.formatting import format_date, link_text, truncate_content
from analytics_dashboard.features.ranking import rank_by_metric
from analytics_dashboard.filters import MetricMode
from analytics_dashboard.io.read import numeric_column

MS_PER_HOUR = 3_600_000
DEFAULT_TOP_POSTS = 7


@dataclass
class PostVelocitySeries:
    post_id: str
    created_at: pd.Timestamp
    content: Any
    url: Any
    history: list[tuple[pd.Timestamp, float]] = field(default_factory=list)
    max_likes: float = 0.0
    max_reposts: float = 0.0
    max_views: float = 0.0

    @property
    def latest_engagement(self) -> float:
        return self.history[-1][1] if self.history else 0.0

    def peak_engagement(self, mode: MetricMode) -> float:
        if mode == MetricMode.views:
            return self.max_views
        return self.max_likes + self.max_reposts

    def points(self) -> list[tuple[float, float]]:
        """(hours since posted, engagement) pairs in receipt order, skew-negative points dropped."""
        aligned: list[tuple[float, float]] = []
        for sampled_at, engagement in self.history:
            if pd.isna(sampled_at) or pd.isna(self.created_at):
                continue
            elapsed_ms = (sampled_at - self.created_at).total_seconds() * 1000.0
            hours = elapsed_ms / MS_PER_HOUR
            if hours >= 0:
                aligned.append((hours, engagement))
        return aligned


def _timestamp_column(frame: pd.DataFrame, column: str) -> pd.Series:
    if column not in frame.columns:
        return pd.Series(pd.NaT, index=frame.index, dtype="datetime64[ns, UTC]")
    return pd.to_datetime(frame[column], errors="coerce", utc=True)


def fold_velocity_rows(frame: pd.DataFrame, mode: MetricMode) -> list[PostVelocitySeries]:
    """Fold engagement-history snapshots into one series per post, in first-seen order."""
    if frame.empty or "post_id" not in frame.columns:
        return []

    created = _timestamp_column(frame, "post_created_at")
    sampled = _timestamp_column(frame, "history_synced_at")
    likes = numeric_column(frame, "likes")
    reposts = numeric_column(frame, "reposts")
    views = numeric_column(frame, "views")
    engagement = views if mode == MetricMode.views else likes + reposts

    series_by_post: dict[str, PostVelocitySeries] = {}
    for position, row in enumerate(frame.to_dict(orient="records")):
        post_id = str(row.get("post_id"))
        series = series_by_post.get(post_id)
        if series is None:
            series = PostVelocitySeries(
                post_id=post_id,
                created_at=created.iloc[position],
                content=row.get("content"),
                url=row.get("url"),
                max_likes=float(likes.iloc[position]),
                max_reposts=float(reposts.iloc[position]),
                max_views=float(views.iloc[position]),
            )
            series_by_post[post_id] = series
        series.max_likes = max(series.max_likes, float(likes.iloc[position]))
        series.max_reposts = max(series.max_reposts, float(reposts.iloc[position]))
        series.max_views = max(series.max_views, float(views.iloc[position]))
        series.history.append((sampled.iloc[position], float(engagement.iloc[position])))
    return list(series_by_post.values())


def top_series_by_latest(
    series: list[PostVelocitySeries], n: int = DEFAULT_TOP_POSTS
) -> list[PostVelocitySeries]:
    ranked = sorted(series, key=lambda item: item.latest_engagement, reverse=True)
    return ranked[: max(0, int(n))]


def series_label(rank: int, series: PostVelocitySeries) -> str:
    return f"{rank}. {truncate_content(series.content, 30, 'Media')}"


def velocity_table_rows(
    series: list[PostVelocitySeries],
    mode: MetricMode,
    n: int = DEFAULT_TOP_POSTS,
) -> pd.DataFrame:
    """Top posts by peak observed engagement, shaped for the velocity table."""
    columns = ["date", "content", "url", "primary", "secondary", "total"]
    if not series:
        return pd.DataFrame(columns=columns)

    views_mode = mode == MetricMode.views
    frame = pd.DataFrame(
        {
            "date": [format_date(item.created_at) for item in series],
            "content": [link_text(item.content, item.url) for item in series],
            "url": [item.url for item in series],
            "primary": [item.max_views if views_mode else item.max_likes for item in series],
            "secondary": ["" if views_mode else item.max_reposts for item in series],
            "total": [item.peak_engagement(mode) for item in series],
        }
    )
    ranked = rank_by_metric(frame, "total")
    return ranked.head(max(0, int(n)))[columns].reset_index(drop=True)


def velocity_table_headers(mode: MetricMode) -> tuple[str, ...]:
    if mode == MetricMode.views:
        return ("Date", "Post", "Views", "", "Total")
    return ("Date", "Post", "Likes", "Reposts", "Total")
