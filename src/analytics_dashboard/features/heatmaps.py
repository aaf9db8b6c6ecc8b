from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from analytics_dashboard.features.formatting import js_round
from analytics_dashboard.io.read import numeric_column
from analytics_dashboard.viz.palette import HEATMAP_EMPTY_CELL, HEATMAP_EMPTY_OPACITY, heatmap_rgba

DAY_LABELS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
HOURS_PER_DAY = 24
CALENDAR_WEEK_SLOTS = 53
CALENDAR_FIRST_WEEK = 1
CALENDAR_LAST_WEEK = 52


@dataclass(frozen=True, slots=True)
class HeatmapCell:
    row: int
    column: int
    value: float
    intensity: float
    opacity: float
    color: str
    tooltip: str


@dataclass(frozen=True, slots=True)
class HeatmapGrid:
    title: str
    row_labels: tuple[str, ...]
    column_labels: tuple[str, ...]
    cells: tuple[tuple[HeatmapCell, ...], ...]
    max_value: float


def day_hour_opacity(value: float, max_value: float) -> float:
    if value <= 0:
        return HEATMAP_EMPTY_OPACITY
    intensity = value / max_value if max_value > 0 else 0.0
    return intensity * 0.9 + 0.1


def calendar_opacity(count: float, max_count: float) -> float:
    if count <= 0:
        return HEATMAP_EMPTY_OPACITY
    return (count / max_count) * 0.8 + 0.2


def _cell_color(value: float, opacity: float) -> str:
    return heatmap_rgba(opacity) if value > 0 else HEATMAP_EMPTY_CELL


def day_hour_values(frame: pd.DataFrame, value_key: str) -> dict[tuple[int, int], float]:
    """Sparse (day, hour) -> value map; duplicate keys resolve to the last row."""
    if frame.empty:
        return {}
    days = numeric_column(frame, "day_of_week", fill=None)
    hours = numeric_column(frame, "hour_of_day", fill=None)
    values = numeric_column(frame, value_key)
    keyed = pd.DataFrame({"day": days, "hour": hours, "value": values}).dropna(
        subset=["day", "hour"]
    )
    keyed = keyed[
        keyed["day"].between(0, len(DAY_LABELS) - 1) & keyed["hour"].between(0, HOURS_PER_DAY - 1)
    ]
    keyed = keyed.drop_duplicates(subset=["day", "hour"], keep="last")
    return {
        (int(row.day), int(row.hour)): float(row.value)
        for row in keyed.itertuples(index=False)
    }


def build_day_hour_heatmap(frame: pd.DataFrame, value_key: str, label: str) -> HeatmapGrid | None:
    if frame.empty:
        return None
    value_map = day_hour_values(frame, value_key)
    max_value = float(numeric_column(frame, value_key).max())
    if not math.isfinite(max_value):
        max_value = 0.0

    rows: list[tuple[HeatmapCell, ...]] = []
    for day_index, day_label in enumerate(DAY_LABELS):
        row_cells: list[HeatmapCell] = []
        for hour in range(HOURS_PER_DAY):
            value = value_map.get((day_index, hour), 0.0)
            opacity = day_hour_opacity(value, max_value)
            row_cells.append(
                HeatmapCell(
                    row=day_index,
                    column=hour,
                    value=value,
                    intensity=(value / max_value) if value > 0 and max_value > 0 else 0.0,
                    opacity=opacity,
                    color=_cell_color(value, opacity),
                    tooltip=f"{day_label} {hour}:00 - {label}: {js_round(value)}",
                )
            )
        rows.append(tuple(row_cells))
    return HeatmapGrid(
        title=f"Best Time to Post ({label})",
        row_labels=DAY_LABELS,
        column_labels=tuple(str(hour) for hour in range(HOURS_PER_DAY)),
        cells=tuple(rows),
        max_value=max_value,
    )


def week_number(value: date) -> int:
    """Week of year under the ISO-8601 rule: the week belongs to the year of its Thursday."""
    return int(value.isocalendar()[1])


def sunday_first_weekday(value: date) -> int:
    return (value.weekday() + 1) % 7


def calendar_grid(frame: pd.DataFrame) -> np.ndarray:
    """Sum post counts into a [53 weeks][7 days] grid; weeks outside 1..52 are dropped."""
    grid = np.zeros((CALENDAR_WEEK_SLOTS, len(DAY_LABELS)), dtype=float)
    if frame.empty or "date_str" not in frame.columns:
        return grid
    dates = pd.to_datetime(frame["date_str"], errors="coerce")
    counts = numeric_column(frame, "post_count")
    working = pd.DataFrame({"date": dates, "count": counts}).dropna(subset=["date"])
    if working.empty:
        return grid
    weeks = working["date"].dt.isocalendar().week.astype(int).to_numpy()
    weekdays = ((working["date"].dt.dayofweek + 1) % 7).astype(int).to_numpy()
    in_range = (weeks >= CALENDAR_FIRST_WEEK) & (weeks <= CALENDAR_LAST_WEEK)
    np.add.at(
        grid,
        (weeks[in_range], weekdays[in_range]),
        working["count"].to_numpy(dtype=float)[in_range],
    )
    return grid


def build_calendar_heatmap(frame: pd.DataFrame) -> HeatmapGrid | None:
    if frame.empty:
        return None
    grid = calendar_grid(frame)
    visible = grid[CALENDAR_FIRST_WEEK : CALENDAR_LAST_WEEK + 1]
    max_count = max(1.0, float(visible.max()))

    rows: list[tuple[HeatmapCell, ...]] = []
    for day_index, day_label in enumerate(DAY_LABELS):
        row_cells: list[HeatmapCell] = []
        for week in range(CALENDAR_FIRST_WEEK, CALENDAR_LAST_WEEK + 1):
            count = float(grid[week, day_index])
            opacity = calendar_opacity(count, max_count)
            row_cells.append(
                HeatmapCell(
                    row=day_index,
                    column=week,
                    value=count,
                    intensity=count / max_count if count > 0 else 0.0,
                    opacity=opacity,
                    color=_cell_color(count, opacity),
                    tooltip=f"Week {week}, {day_label}: {js_round(count)} posts",
                )
            )
        rows.append(tuple(row_cells))
    return HeatmapGrid(
        title="Posting Consistency",
        row_labels=DAY_LABELS,
        column_labels=MONTH_LABELS,
        cells=tuple(rows),
        max_value=max_count,
    )
