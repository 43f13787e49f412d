"""Record type dispatcher — one line in, one typed record out.

The first two characters select the layout; the dispatcher never looks past
the line it was given.
"""

from __future__ import annotations

import logging
from typing import Any

from railcif.core.exceptions import CifFormatError
from railcif.core.types import RawLine
from railcif.models.issues import CifIssue, ErrorKind
from railcif.models.codes import TransactionType
from railcif.models.records import Record
from railcif.parser.fields import LINE_LENGTH, FieldKind, decode_field, encode_field, spelling
from railcif.parser.layouts import LAYOUTS

logger = logging.getLogger(__name__)

RECORD_TYPES = frozenset(LAYOUTS)


def normalize_line(line: RawLine, encoding: str = "latin-1") -> str:
    """Decode bytes and drop the line terminator; padding is kept."""
    if isinstance(line, bytes):
        line = line.decode(encoding)
    return line.rstrip("\r\n")


def _fail(issue: CifIssue, line: str, line_number: int) -> CifFormatError:
    issue.line_number = line_number
    issue.raw = line
    issue.record_type = issue.record_type or line[:2] or None
    return CifFormatError(issue)


def decode_line(line: RawLine, line_number: int = 0, *, encoding: str = "latin-1") -> Record:
    """Decode one physical line into its typed record.

    Raises:
        CifFormatError: carrying ``UnknownRecordType``, ``TruncatedLine``,
            ``IllegalCharacter`` or ``MalformedField``.
    """
    text = normalize_line(line, encoding)
    if len(text) < 2:
        raise _fail(CifIssue(
            kind=ErrorKind.TRUNCATED_LINE,
            message=f"line has {len(text)} characters, cannot read a record type",
            offset=len(text),
        ), text, line_number)

    record_type = text[:2]
    layout = LAYOUTS.get(record_type)
    if layout is None:
        raise _fail(CifIssue(
            kind=ErrorKind.UNKNOWN_RECORD_TYPE,
            message=f"unknown record type {record_type!r}",
            record_type=record_type,
        ), text, line_number)

    if len(text) < LINE_LENGTH:
        raise _fail(CifIssue(
            kind=ErrorKind.TRUNCATED_LINE,
            message=f"line has {len(text)} characters, expected {LINE_LENGTH}",
            offset=len(text),
        ), text, line_number)
    if len(text) > LINE_LENGTH:
        raise _fail(CifIssue(
            kind=ErrorKind.MALFORMED_FIELD,
            message=f"line has {len(text)} characters, expected {LINE_LENGTH}",
            field="line",
            offset=LINE_LENGTH,
        ), text, line_number)

    model, fields = layout
    values: dict[str, Any] = {}
    spellings: dict[str, str] = {}
    try:
        for spec in fields:
            value = decode_field(spec, text)
            if spec.kind is not FieldKind.SPARE:
                values[spec.name] = value
            raw = spelling(spec, text[spec.offset:spec.end], value)
            if raw is not None:
                spellings[spec.name] = raw
    except CifFormatError as exc:
        raise _fail(exc.issue, text, line_number) from None

    if record_type == "BS":
        _check_schedule_header(values, text, line_number)

    logger.debug("decoded %s", record_type, extra={"event": "decoded", "line_number": line_number})
    record = model(line_number=line_number, **values)
    record._spellings.update(spellings)
    return record


def _check_schedule_header(values: dict[str, Any], text: str, line_number: int) -> None:
    """Non-delete schedule headers must state their window and running days."""
    if values["transaction_type"] is TransactionType.DELETE:
        return
    for name, offset in (("date_runs_to", 15), ("days_run", 21)):
        if values[name] is None:
            raise _fail(CifIssue(
                kind=ErrorKind.MALFORMED_FIELD,
                message=f"{name} is required unless the transaction is a delete",
                field=name,
                offset=offset,
            ), text, line_number)
    if values["date_runs_to"] < values["date_runs_from"]:
        raise _fail(CifIssue(
            kind=ErrorKind.MALFORMED_FIELD,
            message="date_runs_to is before date_runs_from",
            field="date_runs_to",
            offset=15,
        ), text, line_number)


def encode_record(record: Record) -> str:
    """Render a physical record back into its 80-column line.

    A decoded record reproduces its source line byte for byte.
    """
    _, fields = LAYOUTS[record.record_type]
    parts = [record.record_type]
    for spec in fields:
        value = None if spec.kind is FieldKind.SPARE else getattr(record, spec.name)
        parts.append(encode_field(spec, value, record._spellings.get(spec.name)))
    line = "".join(parts)
    if len(line) != LINE_LENGTH:
        raise ValueError(f"{record.record_type} layout produced {len(line)} columns")
    return line


