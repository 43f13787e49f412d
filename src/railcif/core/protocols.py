"""Protocol interfaces for railcif collaborators.

Structural typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from railcif.models.issues import ApplyEvent


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventSink(Protocol):
    """Receives one structured event per applied (or rejected) record."""

    def emit(self, event: ApplyEvent) -> None: ...
