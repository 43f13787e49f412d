"""Field extractor — column-exact slicing and typed decoding of one line.

Every field is described by a ``FieldSpec`` (name, 0-based offset, width,
decode kind). Decoding failures raise ``CifFormatError`` carrying a
``CifIssue`` that names the field, its offset and the raw slice:

- ``IllegalCharacter`` — a character outside printable ASCII, or outside the
  field's character class (digits for numbers, dates and times; ``0``/``1``
  for running days).
- ``MalformedField`` — well-formed characters that do not make a valid value
  (month 13, minute 75, a code missing from its table).

``encode_field`` is the inverse, used for round-tripping records to lines. A
value can have more than one spelling (``"  75"`` and ``"0075"``, flags with
gaps); ``spelling`` reports the column text whenever it is not the one
``encode_field`` would write, so the record can carry it back out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any, Optional

from railcif.core.exceptions import CifFormatError
from railcif.models.calendar import DaysRun, JourneyTime
from railcif.models.issues import CifIssue, ErrorKind

LINE_LENGTH = 80
OPEN_ENDED = "999999"


class FieldKind(StrEnum):
    TEXT = "text"  # trailing spaces trimmed
    INT = "int"  # right-aligned digits, leading spaces read as zeros; blank -> None
    CODE = "code"  # value looked up in a StrEnum; blank -> None
    FLAGS = "flags"  # each non-blank character looked up in a StrEnum
    DATE_YYMMDD = "date_yymmdd"  # BS/AA dates; 999999 -> date.max
    DATE_DDMMYY = "date_ddmmyy"  # HD dates
    TIME_HHMM = "time_hhmm"  # HD time of extract
    JOURNEY_TIME = "journey_time"  # HHMM plus optional H in 5-wide fields
    DAYS = "days"  # 7 x 0/1, Monday first
    SPARE = "spare"  # filler, not stored


@dataclass(frozen=True)
class FieldSpec:
    name: str
    offset: int
    length: int
    kind: FieldKind = FieldKind.TEXT
    codes: Optional[type[StrEnum]] = None
    required: bool = False
    pad: str = "0"  # fill for INT fields

    @property
    def end(self) -> int:
        return self.offset + self.length


def _issue(kind: ErrorKind, spec: FieldSpec, raw: str, message: str, offset: int | None = None) -> CifFormatError:
    return CifFormatError(CifIssue(
        kind=kind,
        message=message,
        field=spec.name,
        offset=spec.offset if offset is None else offset,
        field_text=raw,
    ))


def _check_printable(spec: FieldSpec, raw: str) -> None:
    for i, char in enumerate(raw):
        if not " " <= char <= "~":
            raise _issue(
                ErrorKind.ILLEGAL_CHARACTER, spec, raw,
                f"non-printable character {char!r}", offset=spec.offset + i,
            )


def _check_charset(spec: FieldSpec, raw: str, allowed: str, what: str) -> None:
    for i, char in enumerate(raw):
        if char not in allowed:
            raise _issue(
                ErrorKind.ILLEGAL_CHARACTER, spec, raw,
                f"{char!r} is not allowed in a {what} field", offset=spec.offset + i,
            )


_DIGITS = "0123456789"


def _decode_int(spec: FieldSpec, raw: str) -> Optional[int]:
    if not raw.strip():
        return None
    if raw[-1] == " ":
        raise _issue(ErrorKind.MALFORMED_FIELD, spec, raw, f"{raw!r} is not right-aligned")
    # leading blanks are zero-equivalent
    digits = raw.lstrip(" ")
    _check_charset(spec, digits, _DIGITS, "numeric")
    return int(digits)


def _decode_code(spec: FieldSpec, raw: str) -> Optional[StrEnum]:
    value = raw.rstrip()
    if not value:
        return None
    try:
        return spec.codes(value)  # type: ignore[misc]
    except ValueError:
        raise _issue(
            ErrorKind.MALFORMED_FIELD, spec, raw,
            f"{value!r} is not a valid {spec.codes.__name__}",  # type: ignore[union-attr]
        ) from None


def _decode_flags(spec: FieldSpec, raw: str) -> tuple[StrEnum, ...]:
    flags = []
    for i, char in enumerate(raw):
        if char == " ":
            continue
        try:
            flags.append(spec.codes(char))  # type: ignore[misc]
        except ValueError:
            raise _issue(
                ErrorKind.MALFORMED_FIELD, spec, raw,
                f"{char!r} is not a valid {spec.codes.__name__}",  # type: ignore[union-attr]
                offset=spec.offset + i,
            ) from None
    return tuple(flags)


def _decode_date(spec: FieldSpec, raw: str, fmt: str) -> Optional[date]:
    if not raw.strip():
        return None
    _check_charset(spec, raw, _DIGITS, "date")
    if spec.kind is FieldKind.DATE_YYMMDD and raw == OPEN_ENDED:
        return date.max
    try:
        return datetime.strptime(raw, fmt).date()
    except ValueError:
        raise _issue(ErrorKind.MALFORMED_FIELD, spec, raw, f"{raw!r} is not a valid date") from None


def _decode_time(spec: FieldSpec, raw: str) -> Optional[time]:
    if not raw.strip():
        return None
    _check_charset(spec, raw, _DIGITS, "time")
    try:
        return datetime.strptime(raw, "%H%M").time()
    except ValueError:
        raise _issue(ErrorKind.MALFORMED_FIELD, spec, raw, f"{raw!r} is not a valid time") from None


def _decode_journey_time(spec: FieldSpec, raw: str) -> Optional[JourneyTime]:
    if not raw.strip():
        return None
    _check_charset(spec, raw[:4], _DIGITS, "time")
    half = False
    if spec.length == 5:
        _check_charset(spec, raw[4], "H ", "half-minute")
        half = raw[4] == "H"
    hour, minute = int(raw[:2]), int(raw[2:4])
    if hour > 23 or minute > 59:
        raise _issue(ErrorKind.MALFORMED_FIELD, spec, raw, f"{raw!r} is not a valid time")
    return JourneyTime(hour=hour, minute=minute, half=half)


def _decode_days(spec: FieldSpec, raw: str) -> Optional[DaysRun]:
    if not raw.strip():
        return None
    _check_charset(spec, raw, "01", "running-days")
    return DaysRun.from_cif(raw)


def decode_field(spec: FieldSpec, line: str) -> Any:
    """Slice ``spec`` out of a full-length line and decode it."""
    return decode_text(spec, line[spec.offset:spec.end])


def decode_text(spec: FieldSpec, raw: str) -> Any:
    """Decode the column text of one field."""
    _check_printable(spec, raw)

    match spec.kind:
        case FieldKind.TEXT:
            value: Any = raw.rstrip()
        case FieldKind.INT:
            value = _decode_int(spec, raw)
        case FieldKind.CODE:
            value = _decode_code(spec, raw)
        case FieldKind.FLAGS:
            value = _decode_flags(spec, raw)
        case FieldKind.DATE_YYMMDD:
            value = _decode_date(spec, raw, "%y%m%d")
        case FieldKind.DATE_DDMMYY:
            value = _decode_date(spec, raw, "%d%m%y")
        case FieldKind.TIME_HHMM:
            value = _decode_time(spec, raw)
        case FieldKind.JOURNEY_TIME:
            value = _decode_journey_time(spec, raw)
        case FieldKind.DAYS:
            value = _decode_days(spec, raw)
        case FieldKind.SPARE:
            value = None

    if spec.required and value in (None, "", ()):
        raise _issue(ErrorKind.MALFORMED_FIELD, spec, raw, "required field is blank")
    return value


def spelling(spec: FieldSpec, raw: str, value: Any) -> Optional[str]:
    """``raw`` if it is not how ``encode_field`` would write ``value``."""
    return None if encode_field(spec, value) == raw else raw


def _spells(spec: FieldSpec, raw: str, value: Any) -> bool:
    if len(raw) != spec.length:
        return False
    if spec.kind is FieldKind.SPARE:
        return True
    try:
        return decode_text(spec, raw) == value
    except CifFormatError:
        return False


def encode_field(spec: FieldSpec, value: Any, raw: Optional[str] = None) -> str:
    """Render ``value`` into exactly ``spec.length`` characters.

    ``raw`` is a spelling kept from decoding; it is written back as long as it
    still decodes to ``value``.
    """
    if raw is not None and _spells(spec, raw, value):
        return raw
    if value is None or spec.kind is FieldKind.SPARE:
        return " " * spec.length

    match spec.kind:
        case FieldKind.TEXT:
            text = str(value)
        case FieldKind.INT:
            text = str(value).rjust(spec.length, spec.pad)
        case FieldKind.CODE:
            text = value.value
        case FieldKind.FLAGS:
            text = "".join(flag.value for flag in value)
        case FieldKind.DATE_YYMMDD:
            text = OPEN_ENDED if value == date.max else value.strftime("%y%m%d")
        case FieldKind.DATE_DDMMYY:
            text = value.strftime("%d%m%y")
        case FieldKind.TIME_HHMM:
            text = value.strftime("%H%M")
        case FieldKind.JOURNEY_TIME:
            text = value.to_cif(spec.length)
        case FieldKind.DAYS:
            text = value.to_cif()

    if len(text) > spec.length:
        raise ValueError(f"{spec.name}: {text!r} does not fit in {spec.length} columns")
    return text.ljust(spec.length)
