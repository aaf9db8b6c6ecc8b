from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

ALL_POST_TYPES: tuple[str, ...] = (
    "post",
    "image",
    "video",
    "broadcast",
    "thread",
    "album",
    "quote",
    "repost",
    "tag",
)

DATE_RANGE_PRESETS: tuple[str, ...] = (
    "today",
    "yesterday",
    "thisWeek",
    "thisMonth",
    "thisYear",
    "last7",
    "last30",
    "last365",
)


class MetricMode(str, Enum):
    likes = "likes"
    views = "views"


def engagement_key(mode: MetricMode) -> str:
    return "avg_views" if mode == MetricMode.views else "avg_likes"


def engagement_label(mode: MetricMode) -> str:
    return "Avg Views" if mode == MetricMode.views else "Avg Likes"


def _coerce_date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


@dataclass(frozen=True)
class FilterState:
    start_date: date | None = None
    end_date: date | None = None
    post_types: frozenset[str] | None = None
    mode: MetricMode = MetricMode.likes

    @property
    def is_views_mode(self) -> bool:
        return self.mode == MetricMode.views

    @property
    def is_date_filter_active(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    @property
    def is_post_type_filter_active(self) -> bool:
        return self.post_types is not None and len(self.post_types) != len(ALL_POST_TYPES)

    def to_query_parameters(self) -> dict[str, str]:
        """Backend query parameters; mode is applied client-side and never sent."""
        params: dict[str, str] = {}
        if self.start_date is not None:
            params["start_date"] = self.start_date.isoformat()
        if self.end_date is not None:
            params["end_date"] = self.end_date.isoformat()
        if self.post_types:
            # Keep vocabulary order so identical selections serialize identically.
            ordered = [value for value in ALL_POST_TYPES if value in self.post_types]
            params["post_types"] = ",".join(ordered)
        return params


class FilterModel:
    """Owns the current FilterState; every ``apply_*`` replaces it wholesale."""

    def __init__(
        self,
        initial: FilterState | None = None,
        vocabulary: Iterable[str] = ALL_POST_TYPES,
    ) -> None:
        self.vocabulary = frozenset(vocabulary)
        unknown = self.vocabulary - set(ALL_POST_TYPES)
        if unknown:
            raise ValueError(f"Unknown post types in vocabulary: {', '.join(sorted(unknown))}")
        self.state = initial or FilterState()
        if self.state.post_types is None and self.is_restricted:
            self.state = replace(self.state, post_types=self.vocabulary)

    @property
    def is_restricted(self) -> bool:
        """True when the offered post types are a proper subset of every known type."""
        return self.vocabulary != frozenset(ALL_POST_TYPES)

    def apply_date_range(self, start: date | str | None, end: date | str | None) -> bool:
        self.state = replace(
            self.state,
            start_date=_coerce_date(start),
            end_date=_coerce_date(end),
        )
        return True

    def apply_post_types(self, selected: Iterable[str]) -> bool:
        chosen = frozenset(str(value) for value in selected)
        unknown = chosen - self.vocabulary
        if unknown:
            raise ValueError(f"Unknown post types: {', '.join(sorted(unknown))}")
        self.state = replace(
            self.state,
            post_types=None if chosen == self.vocabulary and not self.is_restricted else chosen,
        )
        return True

    def apply_mode(self, mode: MetricMode | str) -> bool:
        resolved = MetricMode(mode)
        if resolved == self.state.mode:
            return False
        self.state = replace(self.state, mode=resolved)
        return True

    def to_query_parameters(self) -> dict[str, str]:
        return self.state.to_query_parameters()


def date_range_preset(name: str, today: date | None = None) -> tuple[date | None, date | None]:
    today = today or date.today()
    if name == "today":
        return today, today
    if name == "yesterday":
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if name == "thisWeek":
        # Weeks start on Sunday.
        return today - timedelta(days=(today.weekday() + 1) % 7), today
    if name == "thisMonth":
        return today.replace(day=1), today
    if name == "thisYear":
        return today.replace(month=1, day=1), today
    if name == "last7":
        return today - timedelta(days=6), today
    if name == "last30":
        return today - timedelta(days=29), today
    if name == "last365":
        return today - timedelta(days=364), today
    return None, None
