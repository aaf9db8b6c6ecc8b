from __future__ import annotations

import pandas as pd

from analytics_dashboard.io.read import numeric_column


def rank_by_metric(frame: pd.DataFrame, key: str) -> pd.DataFrame:
    """Stable descending sort by ``key``; ties keep input order, non-numeric values sink."""
    if frame.empty:
        return frame.copy()
    ordering = -numeric_column(frame, key, fill=None)
    ranked = frame.assign(_rank_key=ordering.to_numpy()).sort_values(
        "_rank_key",
        kind="stable",
        na_position="last",
    )
    return ranked.drop(columns="_rank_key").reset_index(drop=True)


def top_n(frame: pd.DataFrame, n: int) -> pd.DataFrame:
    return frame.head(max(0, int(n))).reset_index(drop=True)
