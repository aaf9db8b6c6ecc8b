from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from analytics_dashboard.viz.specs import RenderSpec


class RenderHandle(Protocol):
    def destroy(self) -> None: ...


class Renderer(Protocol):
    """Drawing capability: turns a declarative spec into a live visual in a slot."""

    def create(self, slot: str, spec: RenderSpec) -> RenderHandle: ...

    def show_placeholder(self, slot: str, message: str) -> None: ...

    def clear_placeholder(self, slot: str) -> None: ...


@dataclass(eq=False)
class PayloadHandle:
    slot: str
    payload: dict[str, Any]
    owner: PayloadRenderer
    alive: bool = True

    def destroy(self) -> None:
        if not self.alive:
            return
        self.alive = False
        self.owner._forget(self)


@dataclass
class PayloadRenderer:
    """Renderer that keeps each slot's serialized spec in memory.

    Used for headless snapshots: the payloads are what a browser charting library
    would receive.
    """

    handles: dict[str, list[PayloadHandle]] = field(default_factory=dict)
    placeholders: dict[str, str] = field(default_factory=dict)
    created: int = 0
    destroyed: int = 0

    def create(self, slot: str, spec: RenderSpec) -> PayloadHandle:
        handle = PayloadHandle(slot=slot, payload=spec.to_dict(), owner=self)
        self.handles.setdefault(slot, []).append(handle)
        self.created += 1
        return handle

    def show_placeholder(self, slot: str, message: str) -> None:
        self.placeholders[slot] = message

    def clear_placeholder(self, slot: str) -> None:
        self.placeholders.pop(slot, None)

    def _forget(self, handle: PayloadHandle) -> None:
        live = self.handles.get(handle.slot, [])
        if handle in live:
            live.remove(handle)
        if not live:
            self.handles.pop(handle.slot, None)
        self.destroyed += 1

    def live_handles(self, slot: str) -> list[PayloadHandle]:
        return [handle for handle in self.handles.get(slot, []) if handle.alive]

    def snapshot(self) -> dict[str, Any]:
        slots: dict[str, Any] = {}
        for slot, handles in sorted(self.handles.items()):
            if handles:
                slots[slot] = {"state": "rendered", "spec": handles[-1].payload}
        for slot, message in sorted(self.placeholders.items()):
            slots[slot] = {"state": "placeholder", "message": message}
        return dict(sorted(slots.items()))
