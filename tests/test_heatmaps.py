from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from analytics_dashboard.features.heatmaps import (
    build_calendar_heatmap,
    build_day_hour_heatmap,
    calendar_grid,
    calendar_opacity,
    day_hour_opacity,
    day_hour_values,
    sunday_first_weekday,
    week_number,
)
from analytics_dashboard.viz import palette


def test_day_hour_values_last_duplicate_wins_and_out_of_range_dropped() -> None:
    frame = pd.DataFrame(
        {
            "day_of_week": [1, 1, 7, 2],
            "hour_of_day": [9, 9, 3, 24],
            "avg_likes": [4, 6, 100, 100],
        }
    )

    assert day_hour_values(frame, "avg_likes") == {(1, 9): 6.0}


def test_day_hour_opacity_is_monotonic_in_value() -> None:
    opacities = [day_hour_opacity(value, 10.0) for value in (0, 1, 2.5, 5, 10)]

    assert opacities[0] == palette.HEATMAP_EMPTY_OPACITY
    assert opacities == sorted(opacities)
    assert opacities[-1] == pytest.approx(1.0)
    assert day_hour_opacity(5, 0) == pytest.approx(0.1)


def test_build_day_hour_heatmap_fills_seven_by_twenty_four_grid() -> None:
    frame = pd.DataFrame(
        {
            "day_of_week": [1, 1],
            "hour_of_day": [9, 10],
            "avg_likes": [10, 5],
        }
    )

    grid = build_day_hour_heatmap(frame, "avg_likes", "Avg Likes")

    assert grid is not None
    assert grid.title == "Best Time to Post (Avg Likes)"
    assert len(grid.cells) == 7
    assert all(len(row) == 24 for row in grid.cells)
    monday_nine = grid.cells[1][9]
    assert monday_nine.opacity == pytest.approx(1.0)
    assert monday_nine.tooltip == "Mon 9:00 - Avg Likes: 10"
    assert grid.cells[1][10].opacity == pytest.approx(0.55)
    empty = grid.cells[0][0]
    assert empty.value == 0.0
    assert empty.color == palette.HEATMAP_EMPTY_CELL


def test_build_day_hour_heatmap_all_zero_values_do_not_divide_by_zero() -> None:
    frame = pd.DataFrame({"day_of_week": [0], "hour_of_day": [0], "avg_views": [0]})

    grid = build_day_hour_heatmap(frame, "avg_views", "Avg Views")

    assert grid is not None
    assert grid.max_value == 0.0
    assert grid.cells[0][0].intensity == 0.0


def test_week_number_follows_thursday_rule() -> None:
    assert week_number(date(2024, 1, 1)) == 1
    assert week_number(date(2021, 1, 1)) == 53
    assert week_number(date(2024, 12, 30)) == 1
    assert sunday_first_weekday(date(2024, 1, 7)) == 0
    assert sunday_first_weekday(date(2024, 1, 6)) == 6


def test_calendar_grid_sums_counts_per_cell_and_drops_week_fifty_three() -> None:
    frame = pd.DataFrame(
        {
            "date_str": ["2024-01-01", "2024-01-01", "2021-01-01", "2024-01-07"],
            "post_count": [2, 3, 9, 1],
        }
    )

    grid = calendar_grid(frame)

    assert grid.shape == (53, 7)
    assert grid[1, 1] == 5.0
    assert grid[1, 0] == 1.0
    assert grid.sum() == 6.0


def test_build_calendar_heatmap_opacity_and_tooltips() -> None:
    frame = pd.DataFrame({"date_str": ["2024-01-01", "2024-01-02"], "post_count": [4, 2]})

    grid = build_calendar_heatmap(frame)

    assert grid is not None
    assert grid.max_value == 4.0
    monday = grid.cells[1][0]
    assert monday.column == 1
    assert monday.opacity == pytest.approx(1.0)
    assert monday.tooltip == "Week 1, Mon: 4 posts"
    assert grid.cells[2][0].opacity == pytest.approx(0.6)
    assert calendar_opacity(0, 4) == palette.HEATMAP_EMPTY_OPACITY


def test_build_calendar_heatmap_with_only_dropped_weeks_floors_max() -> None:
    grid = build_calendar_heatmap(pd.DataFrame({"date_str": ["2021-01-01"], "post_count": [3]}))

    assert grid is not None
    assert grid.max_value == 1.0
    assert all(cell.value == 0.0 for row in grid.cells for cell in row)


def test_empty_heatmap_inputs_return_none() -> None:
    assert build_day_hour_heatmap(pd.DataFrame(), "avg_likes", "Avg Likes") is None
    assert build_calendar_heatmap(pd.DataFrame()) is None
