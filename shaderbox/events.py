# shaderbox/events.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Type, TypeVar

from shaderbox.compiler.pipeline import CompileResult

E = TypeVar("E")


class Event:
    """Base class for all Events."""

    pass


@dataclass(frozen=True, slots=True)
class CompileFinished(Event):
    result: CompileResult


@dataclass(frozen=True, slots=True)
class FrameRateSampled(Event):
    fps: int


@dataclass(frozen=True, slots=True)
class ContextLost(Event):
    pass


@dataclass(frozen=True, slots=True)
class ContextRestored(Event):
    pass


class EventManager:
    """
    Per-type event queues.

    Producers emit at any time; consumers drain one type at a time,
    usually once per frame.
    """

    def __init__(self):
        self._queues: Dict[Type[Any], List[Any]] = defaultdict(list)

    def emit(self, event: Any) -> None:
        event_type = type(event)
        self._queues[event_type].append(event)

    def get(self, event_type: Type[E]) -> List[E]:
        if event_type in self._queues:
            events = self._queues[event_type]
            self._queues[event_type] = []
            return events
        return []

    def latest(self, event_type: Type[E]) -> E | None:
        """Drain a queue and keep only its newest event."""
        events = self.get(event_type)
        return events[-1] if events else None

    def clear_all(self) -> None:
        self._queues.clear()
