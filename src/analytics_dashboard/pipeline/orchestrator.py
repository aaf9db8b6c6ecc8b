from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping
from urllib.parse import parse_qs, urlencode

from analytics_dashboard.config import AppConfig
from analytics_dashboard.filters import FilterModel, FilterState, MetricMode
from analytics_dashboard.io.client import Fetcher
from analytics_dashboard.pipeline.tabs import TabController, TabLoadResult
from analytics_dashboard.pipeline.tasks import TaskRegistry, default_task_registry
from analytics_dashboard.viz.lifecycle import ChartLifecycleManager
from analytics_dashboard.viz.renderer import Renderer

LOGGER = logging.getLogger(__name__)

TAB_QUERY_KEY = "tab"


@dataclass(frozen=True)
class FilterChanged:
    """Base for events that replace the active filter and start a new epoch."""


@dataclass(frozen=True)
class DateRangeApplied(FilterChanged):
    start: date | str | None = None
    end: date | str | None = None


@dataclass(frozen=True)
class PostTypesApplied(FilterChanged):
    selected: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ModeApplied(FilterChanged):
    mode: MetricMode = MetricMode.likes


@dataclass(frozen=True)
class TabActivated:
    tab: str


DashboardEvent = FilterChanged | TabActivated


@dataclass
class DashboardState:
    filters: FilterModel
    lifecycle: ChartLifecycleManager
    active_tab: str
    epoch: int = 0
    history: list[TabLoadResult] = field(default_factory=list)


def initial_tab(query: str | Mapping[str, str] | None, default: str, known: Iterable[str]) -> str:
    """Resolve a deep-linked ``?tab=`` value, falling back to ``default``."""
    if query is None:
        return default
    if isinstance(query, str):
        values = parse_qs(query.lstrip("?")).get(TAB_QUERY_KEY, [])
        requested = values[0] if values else None
    else:
        requested = query.get(TAB_QUERY_KEY)
    if requested and requested in set(known):
        return requested
    return default


def tab_location(tab: str) -> str:
    return f"?{urlencode({TAB_QUERY_KEY: tab})}"


class DashboardOrchestrator:
    """Owns the dashboard state and routes filter and tab events to the tab controller."""

    def __init__(
        self,
        config: AppConfig,
        fetcher: Fetcher,
        renderer: Renderer,
        registry: TaskRegistry | None = None,
        active_tab: str | None = None,
        initial_filters: FilterState | None = None,
    ) -> None:
        self.config = config
        self.registry = registry or default_task_registry()
        tab = active_tab or config.dashboard.default_tab
        if tab not in self.registry:
            raise ValueError(f"Unknown tab: {tab}")
        self.state = DashboardState(
            filters=FilterModel(
                initial=initial_filters or FilterState(mode=config.dashboard.default_mode),
                vocabulary=config.dashboard.post_types,
            ),
            lifecycle=ChartLifecycleManager(renderer),
            active_tab=tab,
        )
        self.tabs = TabController(
            registry=self.registry,
            lifecycle=self.state.lifecycle,
            fetcher=fetcher,
            config=config,
            current_epoch=lambda: self.state.epoch,
        )

    @property
    def filters(self) -> FilterState:
        return self.state.filters.state

    @property
    def loaded_tabs(self) -> set[str]:
        return self.tabs.loaded

    async def start(self) -> TabLoadResult:
        return await self._load_active()

    async def dispatch(self, event: DashboardEvent) -> TabLoadResult | None:
        if isinstance(event, TabActivated):
            if event.tab not in self.registry:
                raise ValueError(f"Unknown tab: {event.tab}")
            self.state.active_tab = event.tab
            return await self._load_active()

        if not self._apply_filter(event):
            LOGGER.debug("Ignoring %s: filter unchanged", type(event).__name__)
            return None

        self.state.epoch += 1
        self.state.history.clear()
        self.state.lifecycle.invalidate_all()
        self.tabs.reset()
        LOGGER.info(
            "Filter changed (%s); epoch %s, reloading %s",
            type(event).__name__,
            self.state.epoch,
            self.state.active_tab,
        )
        return await self._load_active()

    def _apply_filter(self, event: FilterChanged) -> bool:
        model = self.state.filters
        if isinstance(event, DateRangeApplied):
            return model.apply_date_range(event.start, event.end)
        if isinstance(event, PostTypesApplied):
            return model.apply_post_types(event.selected)
        if isinstance(event, ModeApplied):
            return model.apply_mode(event.mode)
        raise TypeError(f"Unsupported event: {type(event).__name__}")

    async def _load_active(self) -> TabLoadResult:
        result = await self.tabs.load(self.state.active_tab, self.filters)
        self.state.history.append(result)
        return result
