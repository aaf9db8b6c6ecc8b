from __future__ import annotations

from typing import Any, Iterable

import pandas as pd


def rows_to_frame(payload: Any, columns: Iterable[str] = ()) -> pd.DataFrame:
    """Turn a decoded JSON array of row objects into a DataFrame.

    Anything that is not a list of mappings (``null``, an object, a scalar) yields an
    empty frame. Requested ``columns`` are always present so transforms can index them.
    """
    expected = list(columns)
    if not isinstance(payload, list):
        return pd.DataFrame(columns=expected)
    records = [row for row in payload if isinstance(row, dict)]
    frame = pd.DataFrame.from_records(records) if records else pd.DataFrame()
    for column in expected:
        if column not in frame.columns:
            frame[column] = pd.Series(dtype="object")
    return frame


def numeric_column(frame: pd.DataFrame, column: str, fill: float | None = 0.0) -> pd.Series:
    if column not in frame.columns:
        return pd.Series(fill, index=frame.index, dtype="float64")
    values = pd.to_numeric(frame[column], errors="coerce")
    return values if fill is None else values.fillna(fill)
