from __future__ import annotations

import logging

from analytics_dashboard.viz.renderer import RenderHandle, Renderer
from analytics_dashboard.viz.specs import NOT_ENOUGH_DATA, RenderSpec

LOGGER = logging.getLogger(__name__)


class ChartLifecycleManager:
    """Tracks at most one live render handle per slot.

    A slot is either rendered (one handle), showing the placeholder (no handle),
    or untouched.
    """

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer
        self._instances: dict[str, RenderHandle] = {}
        self._placeholders: set[str] = set()

    def render(self, slot: str, spec: RenderSpec | None) -> RenderHandle | None:
        self.release(slot)
        if spec is None or spec.is_empty:
            self.renderer.show_placeholder(slot, NOT_ENOUGH_DATA)
            self._placeholders.add(slot)
            return None

        if slot in self._placeholders:
            self.renderer.clear_placeholder(slot)
            self._placeholders.discard(slot)
        handle = self.renderer.create(slot, spec)
        self._instances[slot] = handle
        return handle

    def release(self, slot: str) -> None:
        handle = self._instances.pop(slot, None)
        if handle is not None:
            handle.destroy()

    def invalidate_all(self) -> None:
        released = len(self._instances)
        for slot in list(self._instances):
            self.release(slot)
        for slot in sorted(self._placeholders):
            self.renderer.clear_placeholder(slot)
        self._placeholders.clear()
        LOGGER.debug("Released %s live render instances", released)

    def is_live(self, slot: str) -> bool:
        return slot in self._instances

    def has_placeholder(self, slot: str) -> bool:
        return slot in self._placeholders

    @property
    def live_slots(self) -> tuple[str, ...]:
        return tuple(sorted(self._instances))

    @property
    def live_count(self) -> int:
        return len(self._instances)
