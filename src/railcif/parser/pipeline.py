"""Parse pipeline — lines → typed records → logical records.

``iter_parse`` is lazy and single-pass: it yields logical records and
``CifIssue`` values in file order. ``parse`` drains it into a ``ParsedFile``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Optional

from railcif.core.config import CifSettings
from railcif.core.exceptions import CifFormatError
from railcif.core.types import RawLine
from railcif.diagnostics.collector import ErrorCollector
from railcif.models.issues import CifIssue, ParsedFile
from railcif.parser.aggregator import AggregatorItem, ScheduleAggregator
from railcif.parser.dispatcher import decode_line

logger = logging.getLogger(__name__)


def _as_lines(lines: Iterable[RawLine] | str | bytes) -> Iterable[RawLine]:
    if isinstance(lines, (str, bytes)):
        # only LF (or CR LF) ends a line; form feeds, NEL and the like are data
        pieces = lines.split("\n" if isinstance(lines, str) else b"\n")
        if not pieces[-1]:
            pieces.pop()
        return pieces
    return lines


def iter_parse(
    lines: Iterable[RawLine] | str | bytes,
    *,
    fail_fast: Optional[bool] = None,
    settings: Optional[CifSettings] = None,
) -> Iterator[AggregatorItem]:
    """Yield logical records and issues, one pass, in file order.

    Args:
        lines: Decoded text lines or raw byte lines, with or without their
            terminators. A whole file as one ``str``/``bytes`` is split.
        fail_fast: Raise ``CifFormatError`` on the first issue instead of
            yielding it. ``None`` falls back to ``settings.fail_fast``.
        settings: Defaults to a fresh ``CifSettings()``.
    """
    settings = settings or CifSettings()
    if fail_fast is None:
        fail_fast = settings.fail_fast

    aggregator = ScheduleAggregator()

    def release(items: list[AggregatorItem]) -> Iterator[AggregatorItem]:
        for item in items:
            if fail_fast and isinstance(item, CifIssue):
                raise CifFormatError(item)
            yield item

    line_number = 0
    for line_number, line in enumerate(_as_lines(lines), start=1):
        try:
            record = decode_line(line, line_number, encoding=settings.encoding)
        except CifFormatError as exc:
            yield from release(aggregator.fail(exc.issue))
            continue
        yield from release(aggregator.feed(record))

    yield from release(aggregator.finish())
    logger.debug("parsed %d lines", line_number, extra={"event": "parsed", "line_number": line_number})


def parse(
    lines: Iterable[RawLine] | str | bytes,
    *,
    fail_fast: Optional[bool] = None,
    settings: Optional[CifSettings] = None,
) -> ParsedFile:
    """Parse every line eagerly.

    In accumulate mode the result holds every logical record that survived
    plus every issue. In fail-fast mode the first issue raises.

    Raises:
        CifFormatError: first structural issue, when fail-fast is active.
    """
    settings = settings or CifSettings()
    if fail_fast is None:
        fail_fast = settings.fail_fast

    collector = ErrorCollector(fail_fast=fail_fast)
    records = []
    for item in iter_parse(lines, fail_fast=False, settings=settings):
        if isinstance(item, CifIssue):
            collector.add(item)
        else:
            records.append(item)
    return ParsedFile(records=records, issues=collector.issues)
