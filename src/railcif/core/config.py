"""Runtime configuration using pydantic-settings with the RAILCIF_ env prefix."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class CifSettings(BaseSettings):
    """Settings shared by the parser and the schedule database.

    Every value can be overridden through the environment, e.g.
    ``RAILCIF_FAIL_FAST=true``. Parse and apply calls still take an explicit
    ``fail_fast`` keyword that wins over the value held here.
    """

    model_config = {"env_prefix": "RAILCIF_"}

    fail_fast: bool = False
    encoding: str = "latin-1"  # single-byte; bad bytes surface as IllegalCharacter
    max_overlay_depth: int = 2  # distinct STP levels allowed on one running date
    reset_on_full_extract: bool = True
    progress_interval: int = 10000  # 0 disables progress logging
    log_level: str = "INFO"
