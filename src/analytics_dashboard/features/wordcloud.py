from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from analytics_dashboard.features.formatting import format_number, to_float
from analytics_dashboard.viz.palette import band_color

MIN_FONT_FLOOR = 14.0
MAX_FONT_FLOOR = 60.0
MAX_FONT_CEILING = 200.0


@dataclass(frozen=True, slots=True)
class WordWeight:
    word: str
    value: float
    font_size: float
    intensity: float
    color: str
    hover_text: str


@dataclass(frozen=True, slots=True)
class WordCloudLayout:
    words: tuple[WordWeight, ...]
    min_font_size: float
    max_font_size: float
    value_key: str


def font_size_range(container_width: float) -> tuple[float, float]:
    max_font_size = max(MAX_FONT_FLOOR, min(container_width / 6.0, MAX_FONT_CEILING))
    min_font_size = max(MIN_FONT_FLOOR, max_font_size / 10.0)
    return min_font_size, max_font_size


def log_scale(values: np.ndarray, min_value: float, max_value: float) -> np.ndarray:
    log_min = math.log(max(min_value, 1.0))
    log_max = math.log(max(max_value, 1.0))
    span = log_max - log_min
    if span <= 0.0:
        return np.full(values.shape, 0.5, dtype=float)
    return (np.log(np.maximum(values, 1.0)) - log_min) / span


def hover_text(row: dict[str, Any]) -> str:
    text = f"{row.get('word')}: {format_number(row.get('usage_count'))} uses"
    avg = to_float(row.get("avg_engagement"))
    if avg is not None:
        total = format_number(row.get("total_engagement"))
        text += f", {avg:.1f} avg engagement ({total} total)"
    return text


def normalize_word_weights(
    frame: pd.DataFrame,
    value_key: str,
    container_width: float,
) -> WordCloudLayout | None:
    """Map word values to font sizes on a log scale.

    Returns None when there is nothing meaningful to draw: no numeric values, a
    collapsed value range, or a zero-width container.
    """
    if frame.empty or value_key not in frame.columns or container_width <= 0:
        return None

    values = pd.to_numeric(frame[value_key], errors="coerce")
    valid = values.notna() & np.isfinite(values.astype(float))
    if not valid.any():
        return None

    usable = frame.loc[valid]
    numeric = values.loc[valid].to_numpy(dtype=float)
    min_value = float(numeric.min())
    max_value = float(numeric.max())
    if max_value == min_value:
        return None

    min_font_size, max_font_size = font_size_range(float(container_width))
    intensities = log_scale(numeric, min_value, max_value)
    sizes = min_font_size + intensities * (max_font_size - min_font_size)

    words: list[WordWeight] = []
    hover_by_word: dict[str, str] = {}
    for record, value, size, intensity in zip(
        usable.to_dict(orient="records"), numeric, sizes, intensities
    ):
        word = str(record.get("word", ""))
        # Hover resolves to the first row carrying the word.
        hover_by_word.setdefault(word, hover_text(record))
        words.append(
            WordWeight(
                word=word,
                value=float(value),
                font_size=float(size),
                intensity=float(intensity),
                color=band_color(float(intensity)),
                hover_text=hover_by_word[word],
            )
        )
    return WordCloudLayout(
        words=tuple(words),
        min_font_size=min_font_size,
        max_font_size=max_font_size,
        value_key=value_key,
    )
