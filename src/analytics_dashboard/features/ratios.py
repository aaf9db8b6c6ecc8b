from __future__ import annotations

import pandas as pd

from analytics_dashboard.filters import MetricMode
from analytics_dashboard.io.read import numeric_column

FOLLOW_RATIO_TARGET = 0.5
BUBBLE_RADIUS = 10


def engagement_values(frame: pd.DataFrame, mode: MetricMode) -> pd.Series:
    if mode == MetricMode.views:
        return numeric_column(frame, "views")
    return numeric_column(frame, "likes") + numeric_column(frame, "reposts")


def aggregate_engagement_rate(frame: pd.DataFrame, mode: MetricMode) -> pd.DataFrame:
    """Per-network engagement rate: total engagement / peak followers * 100.

    Networks keep first-appearance order. A network whose peak follower count is
    zero has no defined rate and is left out.
    """
    columns = ["network", "total_engagement", "max_followers", "rate"]
    if frame.empty or "network" not in frame.columns:
        return pd.DataFrame(columns=columns)

    working = pd.DataFrame(
        {
            "network": frame["network"].astype(str),
            "engagement": engagement_values(frame, mode),
            "followers": numeric_column(frame, "followers_count"),
        }
    )
    grouped = (
        working.groupby("network", sort=False)
        .agg(total_engagement=("engagement", "sum"), max_followers=("followers", "max"))
        .reset_index()
    )
    grouped = grouped[grouped["max_followers"] != 0].copy()
    grouped["rate"] = grouped["total_engagement"] / grouped["max_followers"] * 100.0
    return grouped[columns].reset_index(drop=True)


def follow_ratios(frame: pd.DataFrame) -> pd.DataFrame:
    columns = ["network", "followers_count", "following_count", "ratio", "target"]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    followers = numeric_column(frame, "followers_count")
    following = numeric_column(frame, "following_count")
    ratio = (followers / following.where(following > 0)).fillna(0.0)
    return pd.DataFrame(
        {
            "network": frame.get("network", pd.Series("", index=frame.index)).astype(str),
            "followers_count": followers,
            "following_count": following,
            "ratio": ratio,
            "target": FOLLOW_RATIO_TARGET,
        }
    )[columns].reset_index(drop=True)
