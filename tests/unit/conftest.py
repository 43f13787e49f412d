"""Unit test fixtures — settings, event sink and an empty database."""

from __future__ import annotations

import pytest

from railcif.core.config import CifSettings
from railcif.engine.database import ScheduleDatabase
from tests.fakes import MemoryEventSink


@pytest.fixture
def settings():
    return CifSettings(fail_fast=False, progress_interval=0)


@pytest.fixture
def sink():
    return MemoryEventSink()


@pytest.fixture
def database(settings, sink):
    return ScheduleDatabase(settings=settings, sink=sink)
