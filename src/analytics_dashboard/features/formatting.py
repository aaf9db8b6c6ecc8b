from __future__ import annotations

import math
from typing import Any

import pandas as pd


def js_round(value: float) -> int:
    """Round half up, matching how the dashboard formats counts."""
    return int(math.floor(value + 0.5))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    return str(value) == ""


def truncate_content(content: Any, limit: int, fallback: str) -> str:
    if is_blank(content):
        return fallback
    return f"{str(content)[:limit]}..."


def to_float(value: Any) -> float | None:
    if is_blank(value):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    return numeric if math.isfinite(numeric) else None


def format_number(value: Any) -> str:
    numeric = to_float(value)
    if numeric is None:
        return "0"
    return str(int(numeric)) if numeric.is_integer() else str(numeric)


def format_date(value: Any) -> str:
    timestamp = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(timestamp):
        return ""
    return timestamp.tz_convert(None).strftime("%Y-%m-%d")


def link_text(content: Any, url: Any, limit: int = 50) -> str:
    fallback = "Media" if is_blank(url) else "View Post"
    return truncate_content(content, limit, fallback)
