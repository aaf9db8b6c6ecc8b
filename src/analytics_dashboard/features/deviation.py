from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

from analytics_dashboard.features.formatting import (
    format_date,
    format_number,
    js_round,
    link_text,
    to_float,
)
from analytics_dashboard.filters import MetricMode
from analytics_dashboard.io.read import rows_to_frame

DEVIATION_COLUMNS: tuple[str, ...] = ("Date", "Network", "Post", "Engagement", "Deviation")


@dataclass(frozen=True, slots=True)
class DeviationRow:
    date: str
    network: str
    content: str
    content_title: str
    url: str | None
    engagement: float
    expected: float
    deviation: float

    @property
    def engagement_text(self) -> str:
        return f"{format_number(self.engagement)} (Exp: {js_round(self.expected)})"

    @property
    def deviation_text(self) -> str:
        sign = "+" if self.is_positive else ""
        return f"{sign}{js_round(self.deviation)}"

    @property
    def is_positive(self) -> bool:
        return self.deviation >= 0


def _number(value: Any) -> float:
    return to_float(value) or 0.0


def deviation_row(record: dict[str, Any], mode: MetricMode) -> DeviationRow:
    expected = _number(record.get("expected_engagement"))
    if mode == MetricMode.views:
        engagement = _number(record.get("views"))
        # Views mode derives deviation locally; likes mode uses the server's own figure.
        deviation = engagement - expected
    else:
        engagement = _number(record.get("likes")) + _number(record.get("reposts"))
        deviation = _number(record.get("deviation"))
    url = record.get("url")
    content = record.get("content")
    return DeviationRow(
        date=format_date(record.get("created_at")),
        network=str(record.get("network") or ""),
        content=link_text(content, url),
        content_title=str(content or ""),
        url=str(url) if url else None,
        engagement=engagement,
        expected=expected,
        deviation=deviation,
    )


def deviation_rows(items: Any, mode: MetricMode) -> list[DeviationRow]:
    frame = rows_to_frame(items)
    if frame.empty:
        return []
    records = frame.astype(object).where(pd.notna(frame), None).to_dict(orient="records")
    return [deviation_row(record, mode) for record in records]


def split_deviation_payload(payload: Any) -> tuple[Any, Any] | None:
    """Return (positive, negative) item lists, or None when the payload is absent."""
    if not isinstance(payload, dict):
        return None
    return payload.get("positive"), payload.get("negative")
