from __future__ import annotations

from dataclasses import dataclass

ANALYTICS_DATA_PREFIX = "/analytics/data"


@dataclass(frozen=True, slots=True)
class Endpoint:
    name: str
    path: str
    filter_exempt: bool = False


HASHTAGS = Endpoint("hashtags", f"{ANALYTICS_DATA_PREFIX}/hashtags")
MENTIONS = Endpoint("mentions", f"{ANALYTICS_DATA_PREFIX}/mentions")
POST_TYPES = Endpoint("post_types", f"{ANALYTICS_DATA_PREFIX}/types")
NETWORKS = Endpoint("networks", f"{ANALYTICS_DATA_PREFIX}/networks")
TIME_OF_DAY = Endpoint("time_of_day", f"{ANALYTICS_DATA_PREFIX}/time")
POSTING_CONSISTENCY = Endpoint("posting_consistency", f"{ANALYTICS_DATA_PREFIX}/consistency")
SITE_STATS = Endpoint("site_stats", f"{ANALYTICS_DATA_PREFIX}/site")
TOP_PAGES = Endpoint("top_pages", f"{ANALYTICS_DATA_PREFIX}/pages")
ENGAGEMENT_RATE = Endpoint("engagement_rate", f"{ANALYTICS_DATA_PREFIX}/engagement-rate")
# Follow ratio always reflects global account state, regardless of filters.
FOLLOW_RATIO = Endpoint("follow_ratio", f"{ANALYTICS_DATA_PREFIX}/follow-ratio", filter_exempt=True)
COLLABORATIONS = Endpoint("collaborations", f"{ANALYTICS_DATA_PREFIX}/collaborations")
PERFORMANCE_DEVIATION = Endpoint(
    "performance_deviation", f"{ANALYTICS_DATA_PREFIX}/performance-deviation"
)
VELOCITY = Endpoint("velocity", f"{ANALYTICS_DATA_PREFIX}/velocity")
WORDCLOUD = Endpoint("wordcloud", f"{ANALYTICS_DATA_PREFIX}/wordcloud")
WORDCLOUD_ENGAGEMENT = Endpoint(
    "wordcloud_engagement", f"{ANALYTICS_DATA_PREFIX}/wordcloud/engagement"
)

ALL_ENDPOINTS: tuple[Endpoint, ...] = (
    HASHTAGS,
    MENTIONS,
    POST_TYPES,
    NETWORKS,
    TIME_OF_DAY,
    POSTING_CONSISTENCY,
    SITE_STATS,
    TOP_PAGES,
    ENGAGEMENT_RATE,
    FOLLOW_RATIO,
    COLLABORATIONS,
    PERFORMANCE_DEVIATION,
    VELOCITY,
    WORDCLOUD,
    WORDCLOUD_ENGAGEMENT,
)
