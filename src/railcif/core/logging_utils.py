"""Logging helpers for callers embedding railcif."""

from __future__ import annotations

import logging

from railcif.core.config import CifSettings


def configure_logging(level: int | str | None = None) -> None:
    """Configure default logging if no handlers are present.

    ``level`` defaults to ``CifSettings().log_level`` (env ``RAILCIF_LOG_LEVEL``).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    if level is None:
        level = CifSettings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )
