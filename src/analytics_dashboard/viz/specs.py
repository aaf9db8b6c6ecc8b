from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from analytics_dashboard.features.heatmaps import HeatmapGrid
from analytics_dashboard.features.wordcloud import WordCloudLayout

ChartKind = Literal["bar", "line", "doughnut", "bubble"]
CHART_KINDS = frozenset({"bar", "line", "doughnut", "bubble"})

NOT_ENOUGH_DATA = "Not enough data"

BASE_CHART_OPTIONS: dict[str, Any] = {
    "responsive": True,
    "maintainAspectRatio": False,
}


@dataclass(frozen=True)
class ChartSpec:
    kind: ChartKind
    datasets: tuple[dict[str, Any], ...]
    labels: tuple[Any, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in CHART_KINDS:
            raise ValueError(f"Unsupported chart kind: {self.kind}")

    @property
    def is_empty(self) -> bool:
        return not any(dataset.get("data") for dataset in self.datasets)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"datasets": [dict(dataset) for dataset in self.datasets]}
        if self.labels:
            data["labels"] = list(self.labels)
        return {
            "type": self.kind,
            "data": data,
            "options": {**BASE_CHART_OPTIONS, **self.options},
        }


@dataclass(frozen=True)
class WordCloudSpec:
    layout: WordCloudLayout
    grid_size: int = 8
    kind: str = field(default="wordcloud", init=False)

    @property
    def is_empty(self) -> bool:
        return not self.layout.words

    def hover(self, word: str | None) -> str | None:
        """Tooltip text for a hovered word; None clears the tooltip."""
        if word is None:
            return None
        for item in self.layout.words:
            if item.word == word:
                return item.hover_text
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "list": [[item.word, item.font_size] for item in self.layout.words],
            "colors": {item.word: item.color for item in self.layout.words},
            "hover": {item.word: item.hover_text for item in self.layout.words},
            "options": {
                "gridSize": self.grid_size,
                "rotateRatio": 0,
                "shrinkToFit": True,
                "drawOutOfBound": False,
                "minFontSize": self.layout.min_font_size,
                "maxFontSize": self.layout.max_font_size,
            },
        }


@dataclass(frozen=True)
class HeatmapSpec:
    grid: HeatmapGrid
    kind: str = field(default="heatmap", init=False)

    @property
    def is_empty(self) -> bool:
        return not self.grid.cells

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "title": self.grid.title,
            "rowLabels": list(self.grid.row_labels),
            "columnLabels": list(self.grid.column_labels),
            "maxValue": self.grid.max_value,
            "cells": [
                [
                    {
                        "row": cell.row,
                        "column": cell.column,
                        "value": cell.value,
                        "opacity": cell.opacity,
                        "color": cell.color,
                        "tooltip": cell.tooltip,
                    }
                    for cell in row
                ]
                for row in self.grid.cells
            ],
        }


@dataclass(frozen=True, slots=True)
class TableCell:
    text: str
    href: str | None = None
    title: str | None = None
    colspan: int = 1
    tone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": self.text}
        if self.href:
            payload["href"] = self.href
        if self.title:
            payload["title"] = self.title
        if self.colspan != 1:
            payload["colspan"] = self.colspan
        if self.tone:
            payload["tone"] = self.tone
        return payload


@dataclass(frozen=True)
class TableSpec:
    columns: tuple[str, ...]
    rows: tuple[tuple[TableCell, ...], ...]
    kind: str = field(default="table", init=False)

    @property
    def is_empty(self) -> bool:
        # Tables carry their own "not enough data" row instead of a placeholder.
        return False

    @classmethod
    def not_enough_data(cls, columns: tuple[str, ...]) -> TableSpec:
        return cls(
            columns=columns,
            rows=((TableCell(text=NOT_ENOUGH_DATA, colspan=len(columns), tone="muted"),),),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "columns": list(self.columns),
            "rows": [[cell.to_dict() for cell in row] for row in self.rows],
        }


RenderSpec = Union[ChartSpec, WordCloudSpec, HeatmapSpec, TableSpec]
