from __future__ import annotations

from analytics_dashboard.features.deviation import (
    DEVIATION_COLUMNS,
    deviation_row,
    deviation_rows,
    split_deviation_payload,
)
from analytics_dashboard.filters import MetricMode
from analytics_dashboard.viz.specs import NOT_ENOUGH_DATA
from analytics_dashboard.viz.tables import deviation_table


def _record(**overrides):
    record = {
        "created_at": "2024-01-05T10:00:00Z",
        "network": "mastodon",
        "content": "Launch day",
        "url": "https://example.social/1",
        "likes": 10,
        "reposts": 5,
        "views": 100,
        "expected_engagement": 7.6,
        "deviation": 7.4,
    }
    record.update(overrides)
    return record


def test_likes_mode_uses_server_deviation() -> None:
    row = deviation_row(_record(), MetricMode.likes)

    assert row.date == "2024-01-05"
    assert row.engagement_text == "15 (Exp: 8)"
    assert row.deviation_text == "+7"
    assert row.is_positive


def test_views_mode_derives_deviation_from_views() -> None:
    row = deviation_row(_record(expected_engagement=120.5), MetricMode.views)

    assert row.engagement_text == "100 (Exp: 121)"
    assert row.deviation == -20.5
    assert row.deviation_text == "-20"
    assert not row.is_positive


def test_missing_content_uses_link_fallback() -> None:
    assert deviation_row(_record(content=None), MetricMode.likes).content == "View Post"
    assert deviation_row(_record(content=None, url=None), MetricMode.likes).content == "Media"


def test_split_payload_absent_means_no_render() -> None:
    assert split_deviation_payload(None) is None
    assert split_deviation_payload([]) is None
    positive, negative = split_deviation_payload({"positive": [_record()], "negative": []})
    assert len(positive) == 1
    assert negative == []


def test_split_payload_empty_object_yields_empty_sides() -> None:
    assert split_deviation_payload({}) == (None, None)
    table = deviation_table(deviation_rows(None, MetricMode.likes))

    assert table.rows[0][0].text == NOT_ENOUGH_DATA


def test_empty_side_renders_single_not_enough_data_row() -> None:
    table = deviation_table(deviation_rows([], MetricMode.likes))

    assert table.columns == DEVIATION_COLUMNS
    assert len(table.rows) == 1
    (cell,) = table.rows[0]
    assert cell.text == NOT_ENOUGH_DATA
    assert cell.colspan == len(DEVIATION_COLUMNS)


def test_deviation_table_links_content_and_colors_sign() -> None:
    rows = deviation_rows(
        [_record(), _record(deviation=-3.2, content="Quiet day")],
        MetricMode.likes,
    )

    table = deviation_table(rows).to_dict()

    first, second = table["rows"]
    assert first[2] == {
        "text": "Launch day...",
        "href": "https://example.social/1",
        "title": "Launch day",
    }
    assert first[4] == {"text": "+7", "tone": "success"}
    assert second[4] == {"text": "-3", "tone": "danger"}
