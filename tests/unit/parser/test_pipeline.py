"""Tests for iter_parse / parse."""

from __future__ import annotations

import pytest

from railcif.core.config import CifSettings
from railcif.core.exceptions import CifFormatError
from railcif.models.entities import ScheduleRecord
from railcif.models.issues import CifIssue, ErrorKind
from railcif.parser.pipeline import iter_parse, parse
from tests.fakes import cif_lines


def _file(*lines: str) -> str:
    return "\n".join(lines) + "\n"


class TestParse:
    def test_clean_file(self):
        result = parse([cif_lines.hd(), cif_lines.ti(), *cif_lines.schedule(), cif_lines.zz()])
        assert result.ok
        assert [record.record_type for record in result.records] == ["HD", "TI", "SCHEDULE", "ZZ"]

    def test_whole_file_as_text(self):
        result = parse(_file(cif_lines.hd(), *cif_lines.schedule(), cif_lines.zz()))
        assert result.ok
        assert len(result.records) == 3

    def test_only_line_feeds_end_lines(self):
        damaged = cif_lines.ti(description="CAF\x85 STN")
        result = parse(_file(damaged, cif_lines.ti("RDNGSTN", description="READING\x0c"), cif_lines.zz()))
        assert [issue.kind for issue in result.issues] == [ErrorKind.ILLEGAL_CHARACTER] * 2
        assert [issue.line_number for issue in result.issues] == [1, 2]
        assert [record.record_type for record in result.records] == ["ZZ"]

    def test_whole_file_as_bytes_with_crlf(self):
        data = "".join(line + "\r\n" for line in [cif_lines.ti(), cif_lines.zz()]).encode("latin-1")
        result = parse(data)
        assert result.ok
        assert [record.record_type for record in result.records] == ["TI", "ZZ"]

    def test_bytes_lines(self):
        lines = [(line + "\r\n").encode("latin-1") for line in cif_lines.schedule()]
        result = parse(lines)
        assert result.ok
        assert isinstance(result.records[0], ScheduleRecord)

    def test_accumulates_and_continues(self):
        lines = [
            cif_lines.hd(),
            "QQ" + " " * 78,
            cif_lines.ti()[:50],
            *cif_lines.schedule(),
            cif_lines.zz(),
        ]
        result = parse(lines, fail_fast=False)
        assert [issue.kind for issue in result.issues] == [
            ErrorKind.UNKNOWN_RECORD_TYPE,
            ErrorKind.TRUNCATED_LINE,
        ]
        assert [issue.line_number for issue in result.issues] == [2, 3]
        assert [record.record_type for record in result.records] == ["HD", "SCHEDULE", "ZZ"]

    def test_corrupt_line_inside_schedule_drops_the_run_once(self):
        good = cif_lines.schedule(uid="C22222")
        bad = cif_lines.schedule()
        bad[3] = bad[3][:12] + "9X" + bad[3][14:]
        result = parse([*bad, *good])
        (issue,) = result.issues
        assert issue.kind is ErrorKind.ILLEGAL_CHARACTER
        assert issue.line_number == 4
        assert issue.discarded_lines == [1, 2, 3, 5]
        (record,) = result.records
        assert record.key.train_uid == "C22222"

    def test_fail_fast_raises_first_issue(self):
        lines = [cif_lines.hd(), "QQ" + " " * 78, cif_lines.ti()[:50]]
        with pytest.raises(CifFormatError) as exc_info:
            parse(lines, fail_fast=True)
        assert exc_info.value.issue.kind is ErrorKind.UNKNOWN_RECORD_TYPE

    def test_fail_fast_from_settings(self):
        with pytest.raises(CifFormatError):
            parse(["QQ" + " " * 78], settings=CifSettings(fail_fast=True))

    def test_explicit_flag_wins_over_settings(self):
        result = parse(["QQ" + " " * 78], fail_fast=False, settings=CifSettings(fail_fast=True))
        assert not result.ok


class TestIterParse:
    def test_is_lazy(self):
        consumed = []

        def lines():
            for line in [cif_lines.hd(), cif_lines.ti(), cif_lines.zz()]:
                consumed.append(line)
                yield line

        items = iter_parse(lines())
        assert next(items).record_type == "HD"
        assert len(consumed) == 1

    def test_yields_issues_in_order(self):
        items = list(iter_parse([cif_lines.hd(), "QQ" + " " * 78, cif_lines.zz()]))
        assert isinstance(items[1], CifIssue)
        assert items[2].record_type == "ZZ"

    def test_fail_fast_stops_iteration(self):
        items = iter_parse([cif_lines.hd(), "QQ" + " " * 78, cif_lines.zz()], fail_fast=True)
        assert next(items).record_type == "HD"
        with pytest.raises(CifFormatError):
            next(items)
