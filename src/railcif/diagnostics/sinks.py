"""IEventSink implementations."""

from __future__ import annotations

import logging

from railcif.models.issues import ApplyEvent, EventOutcome


class LoggingEventSink:
    """Writes every apply event to the ``railcif.events`` logger at DEBUG."""

    def __init__(self, name: str = "railcif.events") -> None:
        self._logger = logging.getLogger(name)

    def emit(self, event: ApplyEvent) -> None:
        self._logger.debug(
            "%s %s %s",
            event.record_type,
            event.outcome.value,
            event.key or "-",
            extra={"event": event.outcome.value, "line_number": event.line_number},
        )


class MemoryEventSink:
    """List-backed IEventSink for unit tests."""

    def __init__(self) -> None:
        self.events: list[ApplyEvent] = []

    def emit(self, event: ApplyEvent) -> None:
        self.events.append(event)

    def outcomes(self) -> list[EventOutcome]:
        return [event.outcome for event in self.events]

    def clear(self) -> None:
        self.events.clear()
