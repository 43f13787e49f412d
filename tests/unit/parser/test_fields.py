"""Tests for the field extractor."""

from __future__ import annotations

from datetime import date, time

import pytest

from railcif.core.exceptions import CifFormatError
from railcif.models.calendar import DaysRun, JourneyTime
from railcif.models.codes import Catering, OperatingCharacteristic, StpIndicator
from railcif.models.issues import ErrorKind
from railcif.parser.fields import FieldKind, FieldSpec, decode_field, encode_field, spelling


def _decode(kind: FieldKind, text: str, **kwargs):
    spec = FieldSpec("value", 2, len(text), kind, **kwargs)
    return decode_field(spec, "XX" + text)


class TestDecodeField:
    def test_text_trims_trailing_spaces_only(self):
        assert _decode(FieldKind.TEXT, " AB  ") == " AB"

    def test_int_reads_leading_spaces_as_zeros(self):
        assert _decode(FieldKind.INT, "  075") == 75

    def test_blank_int_is_none(self):
        assert _decode(FieldKind.INT, "   ") is None

    def test_int_with_trailing_space_is_malformed(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.INT, "75 ")
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD
        assert exc_info.value.issue.field_text == "75 "

    def test_code_looks_up_enum(self):
        assert _decode(FieldKind.CODE, "O", codes=StpIndicator) is StpIndicator.OVERLAY

    def test_unknown_code_is_malformed(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.CODE, "Q", codes=StpIndicator)
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD
        assert exc_info.value.issue.field == "value"

    def test_flags_skip_blanks(self):
        assert _decode(FieldKind.FLAGS, "C T ", codes=Catering) == (Catering.BUFFET, Catering.TROLLEY)

    def test_yymmdd_date(self):
        assert _decode(FieldKind.DATE_YYMMDD, "240615") == date(2024, 6, 15)

    def test_open_ended_date(self):
        assert _decode(FieldKind.DATE_YYMMDD, "999999") == date.max

    def test_ddmmyy_date(self):
        assert _decode(FieldKind.DATE_DDMMYY, "150124") == date(2024, 1, 15)

    def test_month_thirteen_is_malformed_not_illegal(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.DATE_YYMMDD, "241301")
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.MALFORMED_FIELD
        assert issue.offset == 2
        assert issue.field_text == "241301"

    def test_letter_in_date_is_illegal_character(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.DATE_YYMMDD, "24O601")
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.ILLEGAL_CHARACTER
        assert issue.offset == 4

    def test_hhmm_time(self):
        assert _decode(FieldKind.TIME_HHMM, "0430") == time(4, 30)

    def test_journey_time_with_half_minute(self):
        assert _decode(FieldKind.JOURNEY_TIME, "0827H") == JourneyTime(hour=8, minute=27, half=True)

    def test_journey_time_minute_out_of_range(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.JOURNEY_TIME, "0875 ")
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD

    def test_days_bitmask(self):
        days = _decode(FieldKind.DAYS, "1111100")
        assert days == DaysRun(mask=124)

    def test_days_reject_other_digits(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.DAYS, "1112100")
        assert exc_info.value.issue.kind is ErrorKind.ILLEGAL_CHARACTER

    def test_non_printable_character(self):
        with pytest.raises(CifFormatError) as exc_info:
            _decode(FieldKind.TEXT, "AB\x07D")
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.ILLEGAL_CHARACTER
        assert issue.offset == 4

    def test_required_blank_field(self):
        spec = FieldSpec("tiploc", 2, 7, required=True)
        with pytest.raises(CifFormatError) as exc_info:
            decode_field(spec, "TD" + " " * 78)
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD


class TestEncodeField:
    def test_int_is_zero_padded(self):
        assert encode_field(FieldSpec("speed", 0, 3, FieldKind.INT), 75) == "075"

    def test_none_is_blank(self):
        assert encode_field(FieldSpec("platform", 0, 3), None) == "   "

    def test_date_max_is_open_ended(self):
        assert encode_field(FieldSpec("to", 0, 6, FieldKind.DATE_YYMMDD), date.max) == "999999"

    def test_four_wide_journey_time_drops_half_flag(self):
        spec = FieldSpec("public", 0, 4, FieldKind.JOURNEY_TIME)
        assert encode_field(spec, JourneyTime(hour=9, minute=5)) == "0905"

    def test_overflow_raises(self):
        with pytest.raises(ValueError):
            encode_field(FieldSpec("crs", 0, 3), "LONG")

    def test_int_pad_character(self):
        assert encode_field(FieldSpec("po_mcp_code", 0, 4, FieldKind.INT, pad=" "), 0) == "   0"

    def test_kept_spelling_is_written_back(self):
        spec = FieldSpec("stanox", 0, 5, FieldKind.INT)
        assert encode_field(spec, 730, "  730") == "  730"

    def test_stale_spelling_is_ignored(self):
        spec = FieldSpec("stanox", 0, 5, FieldKind.INT)
        assert encode_field(spec, 731, "  730") == "00731"

    def test_flags_keep_their_gaps(self):
        spec = FieldSpec("operating_characteristics", 0, 6, FieldKind.FLAGS, OperatingCharacteristic)
        flags = (OperatingCharacteristic.DOO_COACHING_STOCK, OperatingCharacteristic.VACUUM_BRAKED)
        assert encode_field(spec, flags) == "DB    "
        assert encode_field(spec, flags, "D B   ") == "D B   "


class TestSpelling:
    def test_canonical_text_needs_no_spelling(self):
        assert spelling(FieldSpec("speed", 0, 3, FieldKind.INT), "075", 75) is None

    def test_space_padded_number(self):
        assert spelling(FieldSpec("speed", 0, 3, FieldKind.INT), " 75", 75) == " 75"

    def test_filled_spare_columns(self):
        spec = FieldSpec("spare_72", 0, 4, FieldKind.SPARE)
        assert spelling(spec, "XY  ", None) == "XY  "
