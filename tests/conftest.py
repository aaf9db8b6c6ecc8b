from __future__ import annotations

import asyncio
import copy
from typing import Any

import pytest

from analytics_dashboard.config import AppConfig
from analytics_dashboard.filters import FilterState
from analytics_dashboard.io.client import build_url
from analytics_dashboard.io.endpoints import Endpoint

STUB_BASE_URL = "http://backend.test"


class StubFetcher:
    """In-memory fetcher keyed by endpoint name.

    A response that is an exception instance is raised instead of returned. An
    ``asyncio.Event`` in ``gates`` holds the next request for that endpoint until set.
    """

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[Endpoint, FilterState, str]] = []

    async def __aenter__(self) -> StubFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def fetch_filtered(self, endpoint: Endpoint, filters: FilterState) -> Any:
        self.calls.append((endpoint, filters, build_url(STUB_BASE_URL, endpoint, filters)))
        gate = self.gates.pop(endpoint.name, None)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        response = self.responses.get(endpoint.name)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def urls(self) -> list[str]:
        return [url for _endpoint, _filters, url in self.calls]

    def called(self, name: str) -> int:
        return sum(1 for endpoint, _filters, _url in self.calls if endpoint.name == name)


def _sample_responses() -> dict[str, Any]:
    return {
        "hashtags": [
            {"tag": "#launch", "usage_count": 4, "avg_likes": 12.5, "avg_views": 300},
            {"tag": "#python", "usage_count": 9, "avg_likes": 30.0, "avg_views": 120},
            {"tag": "#news", "usage_count": 2, "avg_likes": 12.5, "avg_views": 80},
        ],
        "mentions": [
            {"mention": "@alice", "usage_count": 3, "avg_likes": 8, "avg_views": 40},
            {"mention": "@bob", "usage_count": 1, "avg_likes": 20, "avg_views": 90},
        ],
        "post_types": [
            {"post_type": "image", "post_count": 10, "avg_likes": 15, "avg_views": 200},
            {"post_type": "video", "post_count": 4, "avg_likes": 25, "avg_views": 900},
        ],
        "networks": [
            {"network": "mastodon", "post_count": 20, "avg_likes": 5, "avg_views": 0},
            {"network": "bluesky", "post_count": 15, "avg_likes": 9, "avg_views": 0},
        ],
        "engagement_rate": [
            {"network": "mastodon", "likes": 10, "reposts": 5, "views": 0, "followers_count": 100},
            {"network": "mastodon", "likes": 5, "reposts": 0, "views": 0, "followers_count": 200},
            {"network": "bluesky", "likes": 40, "reposts": 10, "views": 0, "followers_count": 500},
            {"network": "threads", "likes": 3, "reposts": 0, "views": 50, "followers_count": 0},
        ],
        "follow_ratio": [
            {"network": "mastodon", "followers_count": 200, "following_count": 100},
            {"network": "bluesky", "followers_count": 50, "following_count": 0},
        ],
        "collaborations": [
            {"collaborator": "@carol", "collaboration_count": 2, "avg_likes": 14, "avg_views": 70},
        ],
        "time_of_day": [
            {"day_of_week": 1, "hour_of_day": 9, "avg_likes": 10, "avg_views": 100},
            {"day_of_week": 1, "hour_of_day": 10, "avg_likes": 5, "avg_views": 40},
            {"day_of_week": 6, "hour_of_day": 22, "avg_likes": 2, "avg_views": 10},
        ],
        "posting_consistency": [
            {"date_str": "2024-01-01", "post_count": 2},
            {"date_str": "2024-01-02", "post_count": 1},
            {"date_str": "2024-03-15", "post_count": 4},
        ],
        "performance_deviation": {
            "positive": [
                {
                    "created_at": "2024-01-05T10:00:00Z",
                    "network": "mastodon",
                    "content": "A post that did far better than usual",
                    "url": "https://example.social/1",
                    "likes": 10,
                    "reposts": 5,
                    "views": 0,
                    "expected_engagement": 7.6,
                    "deviation": 7.4,
                }
            ],
            "negative": [],
        },
        "velocity": [
            {
                "post_id": "p1",
                "post_created_at": "2024-01-01T00:00:00Z",
                "history_synced_at": "2024-01-01T01:00:00Z",
                "likes": 3,
                "reposts": 1,
                "views": 30,
                "content": "First post",
                "url": "https://example.social/p1",
            },
            {
                "post_id": "p1",
                "post_created_at": "2024-01-01T00:00:00Z",
                "history_synced_at": "2024-01-01T02:00:00Z",
                "likes": 8,
                "reposts": 2,
                "views": 90,
                "content": "First post",
                "url": "https://example.social/p1",
            },
            {
                "post_id": "p2",
                "post_created_at": "2024-01-02T00:00:00Z",
                "history_synced_at": "2024-01-02T03:00:00Z",
                "likes": 1,
                "reposts": 0,
                "views": 400,
                "content": None,
                "url": None,
            },
        ],
        "wordcloud": [
            {"word": "python", "usage_count": 100, "avg_engagement": 4.5, "total_engagement": 450},
            {"word": "release", "usage_count": 10, "avg_engagement": 2.0, "total_engagement": 20},
            {"word": "bug", "usage_count": 1, "avg_engagement": 1.0, "total_engagement": 1},
        ],
        "wordcloud_engagement": [
            {"word": "python", "usage_count": 100, "avg_engagement": 4.5, "total_engagement": 450},
            {"word": "release", "usage_count": 10, "avg_engagement": 2.0, "total_engagement": 20},
        ],
        "site_stats": [
            {"date_str": "2024-01-01", "total_visitors": 120, "avg_session_duration": 35.5},
            {"date_str": "2024-01-02", "total_visitors": 90, "avg_session_duration": 41.0},
        ],
        "top_pages": [
            {"url_path": f"/page-{index}", "total_views": 100 - index} for index in range(20)
        ],
    }


@pytest.fixture
def sample_responses() -> dict[str, Any]:
    return _sample_responses()


@pytest.fixture
def stub_fetcher(sample_responses: dict[str, Any]) -> StubFetcher:
    return StubFetcher(sample_responses)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig.model_validate({"backend": {"base_url": STUB_BASE_URL}})
