"""Shared test doubles — memory event sink and CIF line builders."""

from __future__ import annotations

from railcif.diagnostics.sinks import MemoryEventSink
from tests.fakes import cif_lines

__all__ = ["MemoryEventSink", "cif_lines"]
