"""CIF timetable parsing and STP-resolved schedule database."""

from __future__ import annotations

from railcif.core.config import CifSettings
from railcif.engine.database import ScheduleDatabase
from railcif.parser.dispatcher import decode_line, encode_record
from railcif.parser.pipeline import iter_parse, parse

__all__ = ["CifSettings", "ScheduleDatabase", "decode_line", "encode_record", "iter_parse", "parse"]
