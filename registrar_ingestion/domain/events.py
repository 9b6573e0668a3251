"""
Pipeline events and the sink protocol.

Components report progress by emitting ``PipelineEvent`` values to an
``EventSink``; they never print.  ``NullEventSink`` is the default when a
caller supplies none.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Phase(str, Enum):
    EXTRACT = "EXTRACT"
    DEDUP = "DEDUP"
    TRANSFORM = "TRANSFORM"
    VALIDATION = "VALIDATION"
    LOAD = "LOAD"
    WARN = "WARN"


@dataclass(frozen=True)
class PipelineEvent:
    phase: Phase
    message: str
    context: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class EventSink(Protocol):
    """Receiver of pipeline events."""

    def emit(self, event: PipelineEvent) -> None:
        ...


class NullEventSink:
    """Discards every event."""

    def emit(self, event: PipelineEvent) -> None:
        return None


class CollectingEventSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def of_phase(self, phase: Phase) -> list[PipelineEvent]:
        return [e for e in self.events if e.phase == phase]

    def messages(self, phase: Phase | None = None) -> list[str]:
        return [e.message for e in self.events if phase is None or e.phase == phase]


NULL_SINK = NullEventSink()
