from __future__ import annotations

from datetime import date

import pytest

from analytics_dashboard.filters import (
    ALL_POST_TYPES,
    DATE_RANGE_PRESETS,
    FilterModel,
    FilterState,
    MetricMode,
    date_range_preset,
    engagement_key,
    engagement_label,
)


def test_default_filter_sends_no_query_parameters() -> None:
    model = FilterModel()

    assert model.to_query_parameters() == {}
    assert model.state.mode == MetricMode.likes
    assert not model.state.is_date_filter_active
    assert not model.state.is_post_type_filter_active


def test_date_range_serializes_iso_dates() -> None:
    model = FilterModel()
    model.apply_date_range("2024-01-01", date(2024, 1, 31))

    assert model.to_query_parameters() == {"start_date": "2024-01-01", "end_date": "2024-01-31"}
    assert model.state.is_date_filter_active


def test_open_ended_date_range_only_sends_present_bound() -> None:
    model = FilterModel()
    model.apply_date_range(None, "2024-02-01")

    assert model.to_query_parameters() == {"end_date": "2024-02-01"}


def test_post_types_serialize_in_vocabulary_order() -> None:
    model = FilterModel()
    model.apply_post_types(["video", "image"])

    assert model.to_query_parameters() == {"post_types": "image,video"}
    assert model.state.is_post_type_filter_active


def test_selecting_every_post_type_is_the_same_as_no_filter() -> None:
    model = FilterModel()
    model.apply_post_types(list(reversed(ALL_POST_TYPES)))

    assert model.state.post_types is None
    assert "post_types" not in model.to_query_parameters()


def test_restricted_vocabulary_always_sends_explicit_post_types() -> None:
    model = FilterModel(vocabulary=["video", "image"])

    assert model.to_query_parameters() == {"post_types": "image,video"}

    model.apply_post_types(["image", "video"])

    assert model.state.post_types == frozenset({"image", "video"})
    assert model.to_query_parameters() == {"post_types": "image,video"}


def test_empty_post_type_selection_is_omitted_from_query() -> None:
    model = FilterModel()
    model.apply_post_types([])

    assert model.state.post_types == frozenset()
    assert model.to_query_parameters() == {}


def test_unknown_post_type_is_rejected() -> None:
    model = FilterModel()

    with pytest.raises(ValueError, match="Unknown post types: gif"):
        model.apply_post_types(["image", "gif"])


def test_mode_is_never_sent_to_backend() -> None:
    model = FilterModel()

    assert model.apply_mode("views") is True
    assert model.apply_mode(MetricMode.views) is False
    assert model.state.is_views_mode
    assert model.to_query_parameters() == {}


def test_engagement_key_and_label_follow_mode() -> None:
    assert engagement_key(MetricMode.likes) == "avg_likes"
    assert engagement_key(MetricMode.views) == "avg_views"
    assert engagement_label(MetricMode.views) == "Avg Views"


def test_filter_state_is_immutable() -> None:
    state = FilterState()

    with pytest.raises(AttributeError):
        state.mode = MetricMode.views  # type: ignore[misc]


def test_presets_resolve_relative_to_reference_day() -> None:
    today = date(2024, 3, 14)  # Thursday

    assert date_range_preset("today", today) == (today, today)
    assert date_range_preset("yesterday", today) == (date(2024, 3, 13), date(2024, 3, 13))
    assert date_range_preset("thisWeek", today) == (date(2024, 3, 10), today)
    assert date_range_preset("thisMonth", today) == (date(2024, 3, 1), today)
    assert date_range_preset("thisYear", today) == (date(2024, 1, 1), today)
    assert date_range_preset("last7", today) == (date(2024, 3, 8), today)
    assert date_range_preset("last30", today) == (date(2024, 2, 14), today)
    assert date_range_preset("last365", today) == (date(2023, 3, 16), today)


def test_this_week_on_sunday_starts_today() -> None:
    sunday = date(2024, 3, 10)

    assert date_range_preset("thisWeek", sunday) == (sunday, sunday)


def test_every_preset_keeps_start_before_end() -> None:
    for today in (date(2024, 1, 1), date(2024, 2, 29), date(2023, 12, 31)):
        for name in DATE_RANGE_PRESETS:
            start, end = date_range_preset(name, today)
            assert start is not None and end is not None
            assert start <= end


def test_unknown_preset_clears_range() -> None:
    assert date_range_preset("custom", date(2024, 1, 1)) == (None, None)
