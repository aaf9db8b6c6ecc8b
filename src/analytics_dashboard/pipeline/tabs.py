from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from analytics_dashboard.config import AppConfig
from analytics_dashboard.filters import FilterState
from analytics_dashboard.io.client import FetchError, Fetcher
from analytics_dashboard.pipeline.tasks import LoadContext, LoadTask, TaskRegistry
from analytics_dashboard.viz.lifecycle import ChartLifecycleManager

LOGGER = logging.getLogger(__name__)


@dataclass
class TabLoadResult:
    tab: str
    epoch: int
    skipped: bool = False
    rendered: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    stale: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "tab": self.tab,
            "epoch": self.epoch,
            "skipped": self.skipped,
            "rendered": list(self.rendered),
            "failed": dict(self.failed),
            "stale": list(self.stale),
        }


class TabController:
    """Lazily runs each tab's load tasks once per filter epoch.

    Tabs flagged ``always_reload`` bypass the loaded short-circuit. Tasks for a tab
    run concurrently; one failing task never prevents the others from rendering.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        lifecycle: ChartLifecycleManager,
        fetcher: Fetcher,
        config: AppConfig,
        current_epoch: Callable[[], int],
    ) -> None:
        self.registry = registry
        self.lifecycle = lifecycle
        self.fetcher = fetcher
        self.config = config
        self.current_epoch = current_epoch
        self.loaded: set[str] = set()

    def is_loaded(self, tab_id: str) -> bool:
        return tab_id in self.loaded

    def reset(self) -> None:
        self.loaded.clear()

    async def load(self, tab_id: str, filters: FilterState) -> TabLoadResult:
        definition = self.registry.tab(tab_id)
        epoch = self.current_epoch()
        if tab_id in self.loaded and not definition.always_reload:
            return TabLoadResult(tab=tab_id, epoch=epoch, skipped=True)

        # Marked before any await so a re-activation during the load does not double-fire.
        self.loaded.add(tab_id)
        context = LoadContext(filters=filters, fetcher=self.fetcher, config=self.config)
        result = TabLoadResult(tab=tab_id, epoch=epoch)
        await asyncio.gather(
            *(self._run_task(task, context, epoch, result) for task in definition.tasks)
        )
        LOGGER.info(
            "Loaded tab %s (epoch %s): %s rendered, %s failed, %s stale",
            tab_id,
            epoch,
            len(result.rendered),
            len(result.failed),
            len(result.stale),
        )
        return result

    async def _run_task(
        self,
        task: LoadTask,
        context: LoadContext,
        epoch: int,
        result: TabLoadResult,
    ) -> None:
        try:
            commands = await task.run(context)
        except FetchError as exc:
            LOGGER.warning("Load task %s failed: %s", task.name, exc)
            result.failed[task.name] = str(exc)
            return
        except Exception as exc:
            LOGGER.exception("Load task %s raised while transforming its payload", task.name)
            result.failed[task.name] = f"{type(exc).__name__}: {exc}"
            return

        if epoch != self.current_epoch():
            LOGGER.debug(
                "Discarding %s results from epoch %s (current %s)",
                task.name,
                epoch,
                self.current_epoch(),
            )
            result.stale.append(task.name)
            return

        for command in commands:
            self.lifecycle.render(command.slot, command.spec)
            result.rendered.append(command.slot)
