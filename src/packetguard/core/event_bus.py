"""In-memory event bus for gameplay telemetry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger


@dataclass
class Event:
    """Runtime event payload."""

    name: str
    payload: dict[str, Any]


class EventBus:
    """Collects events so the UI layer can react to simulation changes."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, name: str, **payload: Any) -> None:
        logger.trace("event {} {}", name, payload)
        self._events.append(Event(name=name, payload=payload))

    @property
    def events(self) -> list[Event]:
        return self._events

    def named(self, name: str) -> list[Event]:
        return [event for event in self._events if event.name == name]

