"""Tests for record type dispatch, line checks and round-tripping."""

from __future__ import annotations

from datetime import date

import pytest

from railcif.core.exceptions import CifFormatError
from railcif.models.calendar import JourneyTime
from railcif.models.codes import PowerType, StpIndicator, TransactionType, UpdateIndicator
from railcif.models.issues import ErrorKind
from railcif.models.records import (
    AssociationRecord,
    BasicScheduleRecord,
    HeaderRecord,
    TiplocAmendRecord,
)
from railcif.parser.dispatcher import decode_line, encode_record, normalize_line
from railcif.parser.fields import FieldKind
from railcif.parser.layouts import LAYOUTS
from tests.fakes import cif_lines


@pytest.mark.parametrize("record_type", sorted(LAYOUTS))
def test_layout_covers_every_column(record_type):
    _, fields = LAYOUTS[record_type]
    assert fields[0].offset == 2
    for current, following in zip(fields, fields[1:]):
        assert current.end == following.offset
    assert fields[-1].end == 80


@pytest.mark.parametrize(
    "line",
    [
        cif_lines.hd(),
        cif_lines.ti(),
        cif_lines.ta(new_tiploc="PADTONX"),
        cif_lines.td(),
        cif_lines.aa(),
        cif_lines.bs(),
        cif_lines.bs(transaction="D", runs_to="", days="", status="", category="", identity="",
                     course="", service_code="", power="", speed="", seating=""),
        cif_lines.bx(),
        cif_lines.lo(),
        cif_lines.li(passing="0826H", arrival="", departure="", public_arrival="0000", public_departure="0000"),
        cif_lines.cr(power="DMU", speed="075"),
        cif_lines.lt(),
        cif_lines.zz(),
    ],
    ids=lambda line: line[:2],
)
def test_round_trip_is_byte_exact(line):
    assert encode_record(decode_line(line, 1)) == line


# Lines shaped like a real extract: space-padded PO MCP codes, gapped flags,
# half-minute passing times and single-letter allowances.
_EXTRACT_LINES = [
    "TIAACHEN 00081601L" + "AACHEN".ljust(26) + "00005   0",
    "BSNP147722505182512070000001 POO2P67    124659005 EMU    075D     S            P",
    "BSNP147722505182512070000001 POO2P67    124659005 EMU    075D B   S    C T     P",
    "LOCANONST 2026 20261  ADN    TB",
    "LIBORMRKJ           2027H00000000   DCS",
    "LILNDNBDE 2029 2031      202920311  1     T",
    "CRBRNHRST OO2P67    124650005 EMU    075D     S",
    "LTDARTFD  2150 21512     TF",
]


@pytest.mark.parametrize("line", [line.ljust(80) for line in _EXTRACT_LINES], ids=lambda line: line[:9])
def test_extract_lines_round_trip(line):
    assert encode_record(decode_line(line, 1)) == line


class TestPaddedNumbers:
    def test_space_padded_stanox_round_trips(self):
        line = cif_lines.ti(stanox="  730")
        record = decode_line(line)
        assert record.stanox == 730
        assert encode_record(record) == line

    def test_po_mcp_code_is_space_padded(self):
        record = decode_line(cif_lines.ti())
        assert record.po_mcp_code == 0
        assert encode_record(record)[49:53] == "   0"

    def test_left_aligned_number_is_malformed(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(cif_lines.ti(stanox="730"))
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.MALFORMED_FIELD
        assert issue.field == "stanox"

    def test_revised_value_uses_canonical_padding(self):
        record = decode_line(cif_lines.ti(stanox="  730"))
        assert encode_record(record.model_copy(update={"stanox": 87701}))[44:49] == "87701"

    def test_gapped_flags_round_trip(self):
        line = cif_lines.bs(characteristics="D B")
        record = decode_line(line)
        assert len(record.operating_characteristics) == 2
        assert encode_record(record) == line


class TestDecodeLine:
    def test_header(self):
        record = decode_line(cif_lines.hd(update="F"), 1)
        assert isinstance(record, HeaderRecord)
        assert record.date_of_extract == date(2024, 1, 15)
        assert record.update_indicator is UpdateIndicator.FULL
        assert record.line_number == 1

    def test_schedule_header_fields(self):
        record = decode_line(cif_lines.bs(uid="W12345", runs_to="999999", stp="O"), 7)
        assert isinstance(record, BasicScheduleRecord)
        assert record.transaction_type is TransactionType.NEW
        assert record.train_uid == "W12345"
        assert record.date_runs_to == date.max
        assert record.stp_indicator is StpIndicator.OVERLAY
        assert record.power_type is PowerType.ELECTRIC_MULTIPLE_UNIT
        assert record.speed == 100
        assert record.days_run.mask == 127

    def test_delete_schedule_header_needs_no_window(self):
        record = decode_line(cif_lines.bs(transaction="D", runs_to="", days=""), 3)
        assert record.date_runs_to is None
        assert record.days_run is None

    def test_new_schedule_header_needs_window(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(cif_lines.bs(runs_to=""), 3)
        assert exc_info.value.issue.field == "date_runs_to"

    def test_window_must_not_end_before_start(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(cif_lines.bs(runs_from="240601", runs_to="240101"), 3)
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD

    def test_tiploc_rename(self):
        record = decode_line(cif_lines.ta(tiploc="OLDNAME", new_tiploc="NEWNAME"))
        assert isinstance(record, TiplocAmendRecord)
        assert record.new_tiploc == "NEWNAME"

    def test_association(self):
        record = decode_line(cif_lines.aa(end="999999"))
        assert isinstance(record, AssociationRecord)
        assert record.end_date == date.max
        assert record.location == "RDNGSTN"

    def test_intermediate_times(self):
        record = decode_line(cif_lines.li(arrival="0825H", departure="0827"))
        assert record.scheduled_arrival == JourneyTime(hour=8, minute=25, half=True)
        assert record.scheduled_departure == JourneyTime(hour=8, minute=27)
        assert record.scheduled_pass is None

    def test_bytes_input_and_line_terminator(self):
        raw = (cif_lines.td("PADTON") + "\r\n").encode("latin-1")
        assert decode_line(raw).tiploc == "PADTON"


class TestLineErrors:
    def test_unknown_record_type_keeps_raw_line(self):
        line = "QQ" + " " * 78
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(line, 12)
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.UNKNOWN_RECORD_TYPE
        assert issue.record_type == "QQ"
        assert issue.raw == line
        assert issue.line_number == 12

    def test_truncated_line(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(cif_lines.bs()[:60], 4)
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.TRUNCATED_LINE
        assert issue.offset == 60

    def test_truncated_is_distinct_from_illegal_character(self):
        line = cif_lines.bs()
        corrupted = line[:9] + "24X101" + line[15:]
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(corrupted, 4)
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.ILLEGAL_CHARACTER
        assert issue.field == "date_runs_from"
        assert issue.offset == 11
        assert issue.raw == corrupted

    def test_overlong_line(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(cif_lines.zz() + "X")
        assert exc_info.value.issue.kind is ErrorKind.MALFORMED_FIELD

    def test_empty_line(self):
        with pytest.raises(CifFormatError) as exc_info:
            decode_line("")
        assert exc_info.value.issue.kind is ErrorKind.TRUNCATED_LINE

    def test_unknown_code_reports_field(self):
        line = cif_lines.bs(stp="Q")
        with pytest.raises(CifFormatError) as exc_info:
            decode_line(line)
        issue = exc_info.value.issue
        assert issue.kind is ErrorKind.MALFORMED_FIELD
        assert issue.field == "stp_indicator"
        assert issue.offset == 79


def test_normalize_line_keeps_padding():
    assert normalize_line("ZZ   \n") == "ZZ   "


def test_spare_fields_are_not_stored():
    record = decode_line(cif_lines.zz())
    assert set(record.model_dump()) == {"line_number", "record_type"}
    assert all(spec.kind is FieldKind.SPARE for spec in LAYOUTS["ZZ"][1])
