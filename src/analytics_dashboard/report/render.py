from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter
from typing import Any

import pandas as pd
from jinja2 import Environment, FileSystemLoader, select_autoescape

from analytics_dashboard.config import AppConfig
from analytics_dashboard.filters import FilterState
from analytics_dashboard.paths import build_output_paths
from analytics_dashboard.pipeline.tabs import TabLoadResult
from analytics_dashboard.pipeline.tasks import TaskRegistry

LOGGER = logging.getLogger(__name__)


def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [_json_safe(item) for item in sorted(value)]
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (int, str, bool)) or value is None:
        return value
    return str(value)


def _filters_summary(filters: FilterState) -> dict[str, Any]:
    return {
        "start_date": filters.start_date,
        "end_date": filters.end_date,
        "post_types": sorted(filters.post_types) if filters.post_types is not None else None,
        "mode": filters.mode.value,
        "query": filters.to_query_parameters(),
    }


def build_dashboard_payload(
    slots: dict[str, Any],
    filters: FilterState,
    results: list[TabLoadResult],
    registry: TaskRegistry,
    epoch: int,
) -> dict[str, Any]:
    return _json_safe(
        {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "epoch": epoch,
            "filters": _filters_summary(filters),
            "tabs": registry.definitions(),
            "loads": [result.to_dict() for result in results],
            "slots": slots,
        }
    )


def _tab_sections(payload: dict[str, Any]) -> list[dict[str, Any]]:
    slots = payload.get("slots", {})
    loaded = {load["tab"] for load in payload.get("loads", []) if not load.get("skipped")}
    sections = []
    for tab in payload.get("tabs", []):
        if tab["id"] not in loaded:
            continue
        sections.append(
            {
                "id": tab["id"],
                "title": tab["title"],
                "slots": [
                    {"name": slot, **slots[slot]} for slot in tab["slots"] if slot in slots
                ],
            }
        )
    return sections


def render_dashboard(payload: dict[str, Any], out_dir: Path, config: AppConfig) -> Path:
    """Write the JSON payload, one file per slot, and the HTML snapshot; return the HTML path."""
    report_started = perf_counter()
    paths = build_output_paths(out_dir)

    payload_path = paths.root / config.outputs.payload_file
    payload_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    for slot, state in sorted(payload.get("slots", {}).items()):
        (paths.payloads / f"{slot}.json").write_text(
            json.dumps(state, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    template = _template_env().get_template("dashboard.html.j2")
    rendered = template.render(
        generated_at=payload.get("generated_at"),
        filters=payload.get("filters", {}),
        sections=_tab_sections(payload),
        loads=payload.get("loads", []),
        payload_json=json.dumps(payload, ensure_ascii=False).replace("</", "<\\/"),
    )
    report_path = paths.root / config.outputs.html_file
    report_path.write_text(rendered, encoding="utf-8")

    runtime_metrics = {
        "generated_at": payload.get("generated_at"),
        "slot_count": len(payload.get("slots", {})),
        "report_total_ms": round((perf_counter() - report_started) * 1000.0, 3),
        "report_html_bytes": int(report_path.stat().st_size),
    }
    (paths.artifacts / "snapshot_runtime.json").write_text(
        json.dumps(_json_safe(runtime_metrics), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    LOGGER.info("Dashboard snapshot written to %s", report_path)
    return report_path
