"""Type aliases used across railcif."""

from __future__ import annotations

TrainUid = str
TiplocCode = str
LineNumber = int
RawLine = str | bytes
