"""ScheduleDatabase — folds logical records, in file order, into resolved state.

Three independent tables are owned here: TIPLOCs by code, associations by
``AssociationKey`` and schedules by Train UID (each list ordered by the start
of its validity window). Records are consumed, never retained.

Every record is all-or-nothing: all preconditions are checked before the
first mutation, so a rejected record leaves no trace.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from types import MappingProxyType
from typing import Optional

from railcif.core.config import CifSettings
from railcif.core.exceptions import InvariantViolation, ScheduleApplyError
from railcif.core.protocols import IEventSink
from railcif.core.types import RawLine, TiplocCode, TrainUid
from railcif.diagnostics.collector import ErrorCollector
from railcif.diagnostics.sinks import LoggingEventSink
from railcif.engine import precedence
from railcif.models.codes import TransactionType, UpdateIndicator
from railcif.models.entities import (
    Association,
    AssociationKey,
    EntityKind,
    LogicalRecord,
    Schedule,
    ScheduleRecord,
    StopKind,
    Tiploc,
)
from railcif.models.issues import (
    ApplyEvent,
    ApplyReport,
    CifIssue,
    ErrorKind,
    EventOutcome,
)
from railcif.models.records import (
    AssociationRecord,
    HeaderRecord,
    TiplocAmendRecord,
    TiplocDeleteRecord,
    TiplocInsertRecord,
    TrailerRecord,
)
from railcif.parser.dispatcher import encode_record
from railcif.parser.pipeline import iter_parse

logger = logging.getLogger(__name__)

_OUTCOME_BY_TRANSACTION = {
    TransactionType.NEW: EventOutcome.INSERTED,
    TransactionType.REVISE: EventOutcome.REVISED,
    TransactionType.DELETE: EventOutcome.DELETED,
}


def _entity_of(record: LogicalRecord) -> Optional[EntityKind]:
    match record:
        case TiplocInsertRecord() | TiplocAmendRecord() | TiplocDeleteRecord():
            return EntityKind.TIPLOC
        case AssociationRecord():
            return EntityKind.ASSOCIATION
        case ScheduleRecord():
            return EntityKind.SCHEDULE
        case _:
            return None


def _key_of(record: LogicalRecord) -> Optional[str]:
    match record:
        case TiplocInsertRecord() | TiplocAmendRecord() | TiplocDeleteRecord():
            return record.tiploc
        case AssociationRecord():
            return str(Association.key_of(record))
        case ScheduleRecord():
            return str(record.key)
        case _:
            return None


def _check_journey(schedule: Schedule) -> None:
    if schedule.is_cancellation:
        return
    kinds = [stop.kind for stop in schedule.stops]
    if not kinds or kinds[0] is not StopKind.ORIGIN or kinds[-1] is not StopKind.TERMINUS:
        raise InvariantViolation(
            f"schedule {schedule.key} reached the database without origin/terminus: {kinds}"
        )


class ScheduleDatabase:
    """Mutable owner of every TIPLOC, association and schedule.

    Args:
        settings: Defaults to a fresh ``CifSettings()``.
        sink: Receives one ``ApplyEvent`` per applied or rejected record.
            Defaults to ``LoggingEventSink``.
    """

    def __init__(
        self,
        settings: CifSettings | None = None,
        sink: IEventSink | None = None,
    ) -> None:
        self.settings = settings or CifSettings()
        self.sink: IEventSink = sink or LoggingEventSink()
        self.header: Optional[HeaderRecord] = None
        self._tiplocs: dict[TiplocCode, Tiploc] = {}
        self._associations: dict[AssociationKey, Association] = {}
        self._schedules: dict[TrainUid, list[Schedule]] = {}

    # ---- folding ----

    def load(self, lines: Iterable[RawLine] | str | bytes, *, fail_fast: bool | None = None) -> ApplyReport:
        """Parse ``lines`` and apply the result in the same pass."""
        items = iter_parse(lines, fail_fast=False, settings=self.settings)
        return self.apply(items, fail_fast=fail_fast)

    def apply(
        self,
        records: Iterable[LogicalRecord | CifIssue],
        *,
        fail_fast: bool | None = None,
    ) -> ApplyReport:
        """Fold ``records`` into the database in order.

        Parse issues may be interleaved with the records; they are collected
        into the same report.

        Raises:
            CifFormatError: first parse issue, when fail-fast is active.
            ScheduleApplyError: first rejected record, when fail-fast is
                active. Records before it stay applied.
            InvariantViolation: internal defect; never collected.
        """
        if fail_fast is None:
            fail_fast = self.settings.fail_fast
        collector = ErrorCollector(fail_fast=fail_fast)
        report = ApplyReport()
        interval = self.settings.progress_interval
        seen = 0

        for item in records:
            seen += 1
            if isinstance(item, CifIssue):
                collector.add(item)
            else:
                try:
                    self.apply_record(item, report)
                except ScheduleApplyError as exc:
                    report.records_failed += 1
                    self._emit(item, EventOutcome.REJECTED, error_kind=exc.issue.kind)
                    collector.add(exc.issue)
                else:
                    report.records_applied += 1
            if interval and seen % interval == 0:
                logger.info("applied %d records (%d issues so far)", report.records_applied, len(collector))

        report.issues = collector.issues
        logger.info(
            "apply finished: %d applied, %d rejected, %d issues; %d tiplocs, %d associations, %d schedules",
            report.records_applied,
            report.records_failed,
            len(report.issues),
            self.tiploc_count,
            self.association_count,
            self.schedule_count,
        )
        return report

    def apply_record(self, record: LogicalRecord, report: ApplyReport | None = None) -> EventOutcome:
        """Apply one logical record.

        Raises:
            ScheduleApplyError: the record cannot be applied to the current
                state; nothing was changed.
        """
        match record:
            case HeaderRecord():
                outcome = self._apply_header(record)
            case TrailerRecord():
                outcome = EventOutcome.NOTED
            case TiplocInsertRecord():
                outcome = self._insert_tiploc(record)
            case TiplocAmendRecord():
                outcome = self._amend_tiploc(record)
            case TiplocDeleteRecord():
                outcome = self._delete_tiploc(record)
            case AssociationRecord():
                outcome = self._apply_association(record)
            case ScheduleRecord():
                outcome = self._apply_schedule(record)
            case _:
                raise TypeError(f"not a logical record: {type(record).__name__}")

        if report is not None:
            self._count(report, record, outcome)
        self._emit(record, outcome)
        return outcome

    # ---- header ----

    def _apply_header(self, record: HeaderRecord) -> EventOutcome:
        self.header = record
        if record.update_indicator is UpdateIndicator.FULL and self.settings.reset_on_full_extract:
            logger.info(
                "full extract %s: clearing %d tiplocs, %d associations, %d schedules",
                record.current_file_reference or "-",
                self.tiploc_count,
                self.association_count,
                self.schedule_count,
                extra={"event": "reset", "line_number": record.line_number},
            )
            self.clear()
            return EventOutcome.RESET
        return EventOutcome.NOTED

    def clear(self) -> None:
        self._tiplocs.clear()
        self._associations.clear()
        self._schedules.clear()

    # ---- TIPLOCs ----

    def _insert_tiploc(self, record: TiplocInsertRecord) -> EventOutcome:
        if record.tiploc in self._tiplocs:
            raise self._reject(ErrorKind.DUPLICATE_KEY, record, record.tiploc, "TIPLOC already exists")
        self._tiplocs[record.tiploc] = Tiploc.from_record(record)
        return EventOutcome.INSERTED

    def _amend_tiploc(self, record: TiplocAmendRecord) -> EventOutcome:
        if record.tiploc not in self._tiplocs:
            raise self._reject(ErrorKind.UNKNOWN_KEY_FOR_REVISION, record, record.tiploc, "no such TIPLOC to amend")
        tiploc = Tiploc.from_record(record)
        if tiploc.tiploc != record.tiploc and tiploc.tiploc in self._tiplocs:
            raise self._reject(
                ErrorKind.DUPLICATE_KEY, record, record.tiploc,
                f"cannot rename to {tiploc.tiploc}: TIPLOC already exists",
                related=[tiploc.tiploc],
            )
        del self._tiplocs[record.tiploc]
        self._tiplocs[tiploc.tiploc] = tiploc
        return EventOutcome.REVISED

    def _delete_tiploc(self, record: TiplocDeleteRecord) -> EventOutcome:
        if record.tiploc not in self._tiplocs:
            raise self._reject(ErrorKind.UNKNOWN_KEY_FOR_DELETION, record, record.tiploc, "no such TIPLOC to delete")
        del self._tiplocs[record.tiploc]
        return EventOutcome.DELETED

    # ---- associations ----

    def _apply_association(self, record: AssociationRecord) -> EventOutcome:
        key = Association.key_of(record)
        exists = key in self._associations
        match record.transaction_type:
            case TransactionType.NEW:
                if exists:
                    raise self._reject(ErrorKind.DUPLICATE_KEY, record, str(key), "association already exists")
                self._associations[key] = Association.from_record(record)
            case TransactionType.REVISE:
                if not exists:
                    raise self._reject(
                        ErrorKind.UNKNOWN_KEY_FOR_REVISION, record, str(key), "no such association to revise"
                    )
                self._associations[key] = Association.from_record(record)
            case TransactionType.DELETE:
                if not exists:
                    raise self._reject(
                        ErrorKind.UNKNOWN_KEY_FOR_DELETION, record, str(key), "no such association to delete"
                    )
                del self._associations[key]
        return _OUTCOME_BY_TRANSACTION[record.transaction_type]

    # ---- schedules ----

    def _apply_schedule(self, record: ScheduleRecord) -> EventOutcome:
        key = record.key
        existing = self._schedules.get(key.train_uid, [])
        index = next((i for i, s in enumerate(existing) if s.key == key), None)

        match record.transaction_type:
            case TransactionType.DELETE:
                if index is None:
                    raise self._reject(
                        ErrorKind.UNKNOWN_KEY_FOR_DELETION, record, str(key), "no such schedule to delete"
                    )
                del existing[index]
                if not existing:
                    del self._schedules[key.train_uid]
                return EventOutcome.DELETED
            case TransactionType.NEW:
                if index is not None:
                    raise self._reject(ErrorKind.DUPLICATE_KEY, record, str(key), "schedule already exists")
            case TransactionType.REVISE:
                if index is None:
                    raise self._reject(
                        ErrorKind.UNKNOWN_KEY_FOR_REVISION, record, str(key), "no such schedule to revise"
                    )

        schedule = record.schedule
        if schedule is None or schedule.key != key:
            raise InvariantViolation(f"{record.transaction_type.value} for {key} carries no matching schedule")
        _check_journey(schedule)

        others = [s for i, s in enumerate(existing) if i != index]
        self._check_overlaps(record, schedule, others)

        if index is not None:
            existing[index] = schedule
            return EventOutcome.REVISED
        bisect.insort(self._schedules.setdefault(key.train_uid, []), schedule, key=lambda s: s.runs_from)
        return EventOutcome.INSERTED

    def _check_overlaps(self, record: ScheduleRecord, schedule: Schedule, others: list[Schedule]) -> None:
        clashes = precedence.same_level_conflicts(schedule, others)
        if clashes:
            raise self._reject(
                ErrorKind.CONFLICTING_SCHEDULE, record, str(schedule.key),
                f"shares running dates with another {schedule.stp_indicator.name.lower()} schedule",
                related=[str(s.key) for s in clashes],
            )
        depth = self.settings.max_overlay_depth
        violation = precedence.overlay_depth_violation(schedule, others, depth)
        if violation is not None:
            day, present = violation
            raise self._reject(
                ErrorKind.CONFLICTING_SCHEDULE, record, str(schedule.key),
                f"more than {depth} STP levels would run on {day.isoformat()}",
                related=[str(s.key) for s in present],
            )

    # ---- bookkeeping ----

    def _reject(
        self,
        kind: ErrorKind,
        record: LogicalRecord,
        key: str,
        message: str,
        related: list[str] | None = None,
    ) -> ScheduleApplyError:
        raw = "" if isinstance(record, ScheduleRecord) else encode_record(record)
        return ScheduleApplyError(CifIssue(
            kind=kind,
            message=message,
            line_number=record.line_number,
            raw=raw,
            record_type=record.record_type,
            key=key,
            related_keys=related or [],
        ))

    def _emit(self, record: LogicalRecord, outcome: EventOutcome, error_kind: ErrorKind | None = None) -> None:
        self.sink.emit(ApplyEvent(
            line_number=record.line_number,
            record_type=record.record_type,
            outcome=outcome,
            entity=_entity_of(record),
            key=_key_of(record),
            error_kind=error_kind,
        ))

    @staticmethod
    def _count(report: ApplyReport, record: LogicalRecord, outcome: EventOutcome) -> None:
        entity = _entity_of(record)
        if entity is None:
            return
        counts = report.counts_for(entity)
        match outcome:
            case EventOutcome.INSERTED:
                counts.inserted += 1
            case EventOutcome.REVISED:
                counts.revised += 1
            case EventOutcome.DELETED:
                counts.deleted += 1

    # ---- queries ----

    @property
    def tiplocs(self) -> Mapping[str, Tiploc]:
        return MappingProxyType(self._tiplocs)

    @property
    def associations(self) -> Mapping[AssociationKey, Association]:
        return MappingProxyType(self._associations)

    @property
    def tiploc_count(self) -> int:
        return len(self._tiplocs)

    @property
    def association_count(self) -> int:
        return len(self._associations)

    @property
    def schedule_count(self) -> int:
        return sum(len(schedules) for schedules in self._schedules.values())

    def train_uids(self) -> list[str]:
        return sorted(self._schedules)

    def tiploc(self, code: TiplocCode) -> Optional[Tiploc]:
        return self._tiplocs.get(code)

    def associations_for(self, train_uid: TrainUid) -> list[Association]:
        return [
            association for key, association in self._associations.items()
            if train_uid in (key.main_train_uid, key.associated_train_uid)
        ]

    def schedules_for(self, train_uid: TrainUid) -> list[Schedule]:
        """Every stored schedule of ``train_uid``, all STP levels, by start date."""
        return list(self._schedules.get(train_uid, ()))

    def schedules_at(self, tiploc: TiplocCode, on: date | None = None) -> list[Schedule]:
        """Schedules calling at or passing ``tiploc``.

        With ``on`` only the precedence-resolved schedule of each train for
        that date is considered.
        """
        if on is not None:
            candidates = self.schedules_on(on)
        else:
            candidates = [s for schedules in self._schedules.values() for s in schedules]
        return [s for s in candidates if any(stop.tiploc == tiploc for stop in s.stops)]

    def resolve(self, train_uid: TrainUid, on: date) -> Optional[Schedule]:
        """Highest-precedence schedule of ``train_uid`` running on ``on``.

        A cancellation is returned as-is; callers decide what it means.
        """
        return precedence.resolve_on(self._schedules.get(train_uid, ()), on)

    def schedules_on(
        self,
        on: date,
        train_uid: str | None = None,
        *,
        include_cancelled: bool = False,
    ) -> list[Schedule]:
        """Precedence-resolved schedules active on ``on``, at most one per train."""
        uids = [train_uid] if train_uid is not None else sorted(self._schedules)
        active = []
        for uid in uids:
            schedule = self.resolve(uid, on)
            if schedule is None:
                continue
            if schedule.is_cancellation and not include_cancelled:
                continue
            active.append(schedule)
        return active
