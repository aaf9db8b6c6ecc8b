from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

import typer

from analytics_dashboard.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from analytics_dashboard.filters import (
    DATE_RANGE_PRESETS,
    FilterModel,
    FilterState,
    MetricMode,
    date_range_preset,
)
from analytics_dashboard.io.client import DashboardClient
from analytics_dashboard.logging import configure_logging
from analytics_dashboard.paths import build_output_paths
from analytics_dashboard.pipeline.orchestrator import DashboardOrchestrator, TabActivated
from analytics_dashboard.pipeline.tasks import default_task_registry
from analytics_dashboard.report.render import build_dashboard_payload, render_dashboard
from analytics_dashboard.viz.renderer import PayloadRenderer

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _parse_date(value: str | None, option: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{option} must be an ISO date (YYYY-MM-DD)") from exc


def _build_filters(
    cfg: AppConfig,
    start: str | None,
    end: str | None,
    preset: str | None,
    post_types: list[str] | None,
    mode: MetricMode | None,
) -> FilterState:
    model = FilterModel(
        initial=FilterState(mode=mode or cfg.dashboard.default_mode),
        vocabulary=cfg.dashboard.post_types,
    )
    if preset:
        if preset not in DATE_RANGE_PRESETS:
            raise typer.BadParameter(
                f"Unknown preset '{preset}'. Choose from: {', '.join(DATE_RANGE_PRESETS)}"
            )
        model.apply_date_range(*date_range_preset(preset))
    else:
        model.apply_date_range(_parse_date(start, "--start"), _parse_date(end, "--end"))
    if post_types:
        try:
            model.apply_post_types(post_types)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    return model.state


async def _run_snapshot(
    cfg: AppConfig,
    filters: FilterState,
    tabs: list[str],
) -> tuple[DashboardOrchestrator, PayloadRenderer]:
    renderer = PayloadRenderer()
    async with DashboardClient(cfg.backend) as client:
        orchestrator = DashboardOrchestrator(
            config=cfg,
            fetcher=client,
            renderer=renderer,
            active_tab=tabs[0],
            initial_filters=filters,
        )
        await orchestrator.start()
        for tab in tabs[1:]:
            await orchestrator.dispatch(TabActivated(tab))
    return orchestrator, renderer


@app.command()
def snapshot(
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    tab: list[str] | None = typer.Option(
        None,
        help="Tab to load; repeat for several. Defaults to the configured default tab.",
    ),
    start: str | None = typer.Option(None, help="Start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, help="End date (YYYY-MM-DD)."),
    preset: str | None = typer.Option(None, help="Named date range, overrides --start/--end."),
    post_type: list[str] | None = typer.Option(
        None,
        help="Post type to include; repeat for several. Defaults to all.",
    ),
    mode: MetricMode | None = typer.Option(None, help="Engagement metric: likes or views."),
) -> None:
    """Load dashboard tabs from the backend and write JSON + HTML snapshots."""
    configure_logging()
    cfg = _load_app_config(config)
    registry = default_task_registry()
    tabs = list(tab or [cfg.dashboard.default_tab])
    unknown = [name for name in tabs if name not in registry]
    if unknown:
        raise typer.BadParameter(
            f"Unknown tab(s): {', '.join(unknown)}. Choose from: {', '.join(registry.tab_ids)}"
        )
    filters = _build_filters(cfg, start, end, preset, post_type, mode)

    orchestrator, renderer = asyncio.run(_run_snapshot(cfg, filters, tabs))
    build_output_paths(out)
    payload = build_dashboard_payload(
        slots=renderer.snapshot(),
        filters=orchestrator.filters,
        results=orchestrator.state.history,
        registry=orchestrator.registry,
        epoch=orchestrator.state.epoch,
    )
    report_path = render_dashboard(payload, out_dir=out, config=cfg)
    failed = sum(len(result.failed) for result in orchestrator.state.history)
    typer.echo(f"Snapshot written to: {report_path} ({len(payload['slots'])} slots, {failed} failed)")


@app.command()
def presets(
    today: str | None = typer.Option(None, help="Reference date (YYYY-MM-DD); defaults to today."),
) -> None:
    """Print the date range each preset resolves to."""
    reference = _parse_date(today, "--today") or date.today()
    for name in DATE_RANGE_PRESETS:
        start, end = date_range_preset(name, today=reference)
        typer.echo(f"{name}: {start.isoformat()} .. {end.isoformat()}")


@app.command()
def tabs() -> None:
    """List dashboard tabs and the slots each one renders."""
    for definition in default_task_registry().definitions():
        reload_note = " (reloads on every activation)" if definition["always_reload"] else ""
        typer.echo(f"{definition['id']}{reload_note}: {', '.join(definition['slots'])}")


if __name__ == "__main__":
    app()
