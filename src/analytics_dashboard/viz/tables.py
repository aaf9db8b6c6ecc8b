from __future__ import annotations

import pandas as pd

from analytics_dashboard.features.deviation import DEVIATION_COLUMNS, DeviationRow
from analytics_dashboard.features.formatting import format_number, is_blank
from analytics_dashboard.features.velocity import velocity_table_headers
from analytics_dashboard.filters import MetricMode
from analytics_dashboard.viz.specs import TableCell, TableSpec


def deviation_table(rows: list[DeviationRow]) -> TableSpec:
    if not rows:
        return TableSpec.not_enough_data(DEVIATION_COLUMNS)
    return TableSpec(
        columns=DEVIATION_COLUMNS,
        rows=tuple(
            (
                TableCell(text=row.date),
                TableCell(text=row.network, tone="badge"),
                TableCell(text=row.content, href=row.url, title=row.content_title),
                TableCell(text=row.engagement_text),
                TableCell(
                    text=row.deviation_text,
                    tone="success" if row.is_positive else "danger",
                ),
            )
            for row in rows
        ),
    )


def velocity_table(frame: pd.DataFrame, mode: MetricMode) -> TableSpec:
    headers = velocity_table_headers(mode)
    if frame.empty:
        return TableSpec.not_enough_data(headers)
    table_rows = []
    for record in frame.to_dict(orient="records"):
        url = record.get("url")
        secondary = record.get("secondary")
        table_rows.append(
            (
                TableCell(text=str(record.get("date") or "")),
                TableCell(
                    text=str(record.get("content") or ""),
                    href=None if is_blank(url) else str(url),
                ),
                TableCell(text=format_number(record.get("primary"))),
                TableCell(text="" if is_blank(secondary) else format_number(secondary)),
                TableCell(text=format_number(record.get("total")), tone="strong"),
            )
        )
    return TableSpec(columns=headers, rows=tuple(table_rows))
