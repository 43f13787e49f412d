"""Continuation aggregator — folds BS/BX/LO/LI/CR/LT runs into one logical
``ScheduleRecord``.

Grammar of one run::

    BS [BX] LO { LI | CR (LI | LT) } LT

A BS whose transaction is Delete, or whose STP indicator is Cancellation,
stands alone (optionally followed by one BX). Every other record type passes
straight through, but only between runs: receiving one mid-run is a
``MalformedScheduleSequence``.

On any break the partial run is dropped and the offending record is
re-processed from ``AWAITING_SCHEDULE``. The issue then stays open until the
next logical record completes: orphan body lines, and any run that breaks
again before completing, are listed in that issue's ``discarded_lines``
rather than each raising a new issue. One damaged region, one issue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, Union

from railcif.core.types import LineNumber
from railcif.models.calendar import JourneyTime, ValidityWindow
from railcif.models.codes import StpIndicator, TransactionType
from railcif.models.entities import (
    ChangeEnRoute,
    LogicalRecord,
    Schedule,
    ScheduleKey,
    ScheduleRecord,
    ServiceCharacteristics,
    Stop,
    StopKind,
)
from railcif.models.issues import CifIssue, ErrorKind
from railcif.models.records import (
    BasicScheduleExtraRecord,
    BasicScheduleRecord,
    ChangeEnRouteRecord,
    LocationIntermediateRecord,
    LocationOriginRecord,
    LocationTerminusRecord,
    Record,
)
from railcif.parser.dispatcher import encode_record

logger = logging.getLogger(__name__)

AggregatorItem = Union[LogicalRecord, CifIssue]

_BODY_TYPES = frozenset({"BX", "LO", "LI", "CR", "LT"})
_SCHEDULE_TYPES = _BODY_TYPES | {"BS"}


class AggregatorState(StrEnum):
    AWAITING_SCHEDULE = "awaiting_schedule"
    AWAITING_ORIGIN = "awaiting_origin"  # after BS; BX or LO next
    IN_JOURNEY = "in_journey"  # after LO or LI
    AFTER_CHANGE_EN_ROUTE = "after_change_en_route"  # after CR; LI or LT next
    STANDALONE = "standalone"  # delete/cancellation BS; optional BX next


@dataclass
class _PartialSchedule:
    header: BasicScheduleRecord
    extra: Optional[BasicScheduleExtraRecord] = None
    stops: list[Stop] = field(default_factory=list)
    pending_change: Optional[ChangeEnRoute] = None
    lines: list[LineNumber] = field(default_factory=list)


def _public(value: Optional[JourneyTime]) -> Optional[JourneyTime]:
    # 0000 in a public time column means "not advertised"
    if value is None or (value.hour == 0 and value.minute == 0):
        return None
    return value


def _characteristics(record: BasicScheduleRecord | ChangeEnRouteRecord) -> ServiceCharacteristics:
    return ServiceCharacteristics(**{
        name: getattr(record, name) for name in ServiceCharacteristics.model_fields
    })


def _stop(record: LocationOriginRecord | LocationIntermediateRecord | LocationTerminusRecord) -> Stop:
    if isinstance(record, LocationOriginRecord):
        return Stop(
            kind=StopKind.ORIGIN,
            tiploc=record.location,
            tiploc_suffix=record.tiploc_suffix,
            scheduled_departure=record.scheduled_departure,
            public_departure=_public(record.public_departure),
            platform=record.platform,
            line=record.line,
            activity=record.activity,
            engineering_allowance=record.engineering_allowance,
            pathing_allowance=record.pathing_allowance,
            performance_allowance=record.performance_allowance,
        )
    if isinstance(record, LocationIntermediateRecord):
        return Stop(
            kind=StopKind.INTERMEDIATE,
            tiploc=record.location,
            tiploc_suffix=record.tiploc_suffix,
            scheduled_arrival=record.scheduled_arrival,
            scheduled_departure=record.scheduled_departure,
            scheduled_pass=record.scheduled_pass,
            public_arrival=_public(record.public_arrival),
            public_departure=_public(record.public_departure),
            platform=record.platform,
            line=record.line,
            path=record.path,
            activity=record.activity,
            engineering_allowance=record.engineering_allowance,
            pathing_allowance=record.pathing_allowance,
            performance_allowance=record.performance_allowance,
        )
    return Stop(
        kind=StopKind.TERMINUS,
        tiploc=record.location,
        tiploc_suffix=record.tiploc_suffix,
        scheduled_arrival=record.scheduled_arrival,
        public_arrival=_public(record.public_arrival),
        platform=record.platform,
        path=record.path,
        activity=record.activity,
    )


def build_schedule(
    header: BasicScheduleRecord,
    extra: Optional[BasicScheduleExtraRecord],
    stops: list[Stop],
) -> Schedule:
    """Assemble a Schedule entity from one complete run."""
    extra = extra or BasicScheduleExtraRecord()
    return Schedule(
        train_uid=header.train_uid,
        stp_indicator=header.stp_indicator,
        window=ValidityWindow(
            start=header.date_runs_from,
            end=header.date_runs_to,
            days=header.days_run,
        ),
        bank_holiday_running=header.bank_holiday_running,
        train_status=header.train_status,
        characteristics=_characteristics(header),
        traction_class=extra.traction_class,
        uic_code=extra.uic_code,
        atoc_code=extra.atoc_code,
        applicable_timetable=extra.applicable_timetable_code == "Y",
        retail_service_id=extra.retail_service_id,
        stops=tuple(stops),
    )


def _absorb(issue: CifIssue, partial: _PartialSchedule) -> None:
    """Widen ``issue`` over a dropped run, naming its train."""
    issue.discarded_lines.extend(partial.lines)
    uid = partial.header.train_uid
    if uid != issue.key and uid not in issue.related_keys:
        issue.related_keys.append(uid)


class ScheduleAggregator:
    """Explicit state machine over the physical record stream.

    Feed records in file order with ``feed``; report lines that failed to
    decode with ``fail``; call ``finish`` once at end of input. Each call
    returns the logical records and issues it produced, in order.
    """

    def __init__(self) -> None:
        self._state = AggregatorState.AWAITING_SCHEDULE
        self._partial: Optional[_PartialSchedule] = None
        self._discarding: Optional[CifIssue] = None

    @property
    def state(self) -> AggregatorState:
        return self._state

    def feed(self, record: Record) -> list[AggregatorItem]:
        out: list[AggregatorItem] = []
        self._step(record, out)
        return out

    def fail(self, issue: CifIssue) -> list[AggregatorItem]:
        """A line could not be decoded; contain the damage to its run."""
        out: list[AggregatorItem] = []
        if self._state is AggregatorState.STANDALONE:
            self._emit(out)
        if self._partial is not None:
            _absorb(issue, self._partial)
            logger.debug("dropping schedule %s after undecodable line %s",
                         self._partial.header.train_uid, issue.line_number)
            self._reset()
            self._discarding = issue
        elif issue.record_type in _SCHEDULE_TYPES:
            self._discarding = issue
        else:
            self._discarding = None
        out.append(issue)
        return out

    def finish(self) -> list[AggregatorItem]:
        out: list[AggregatorItem] = []
        if self._state is AggregatorState.STANDALONE:
            self._emit(out)
        elif self._partial is not None:
            header = self._partial.header
            if self._discarding is not None:
                _absorb(self._discarding, self._partial)
            else:
                out.append(CifIssue(
                    kind=ErrorKind.MALFORMED_SCHEDULE_SEQUENCE,
                    message="input ended before the schedule reached its terminus",
                    line_number=header.line_number,
                    raw=encode_record(header),
                    record_type="BS",
                    key=header.train_uid,
                    discarded_lines=list(self._partial.lines),
                ))
            self._reset()
        self._discarding = None
        return out

    # ---- transitions ----

    def _step(self, record: Record, out: list[AggregatorItem]) -> None:
        record_type = record.record_type
        state = self._state

        if state is AggregatorState.AWAITING_SCHEDULE:
            if record_type == "BS":
                self._start(record)
            elif record_type in _BODY_TYPES:
                self._orphan(record, out)
            else:
                self._discarding = None
                out.append(record)
            return

        if state is AggregatorState.STANDALONE:
            if record_type == "BX":
                self._partial.extra = record
                self._partial.lines.append(record.line_number)
                self._emit(out)
            else:
                self._emit(out)
                self._step(record, out)
            return

        partial = self._partial
        if record_type == "BX" and state is AggregatorState.AWAITING_ORIGIN and partial.extra is None:
            partial.extra = record
        elif record_type == "LO" and state is AggregatorState.AWAITING_ORIGIN:
            partial.stops.append(_stop(record))
            self._state = AggregatorState.IN_JOURNEY
        elif record_type == "LI" and state in (AggregatorState.IN_JOURNEY, AggregatorState.AFTER_CHANGE_EN_ROUTE):
            self._add_stop(record)
            self._state = AggregatorState.IN_JOURNEY
        elif record_type == "CR" and state is AggregatorState.IN_JOURNEY:
            self._change_en_route(record)
            self._state = AggregatorState.AFTER_CHANGE_EN_ROUTE
        elif record_type == "LT" and state in (AggregatorState.IN_JOURNEY, AggregatorState.AFTER_CHANGE_EN_ROUTE):
            self._add_stop(record)
            partial.lines.append(record.line_number)
            self._emit(out)
            return
        else:
            self._break(record, out)
            return
        partial.lines.append(record.line_number)

    def _start(self, header: BasicScheduleRecord) -> None:
        self._partial = _PartialSchedule(header=header, lines=[header.line_number])
        standalone = (
            header.transaction_type is TransactionType.DELETE
            or header.stp_indicator is StpIndicator.CANCELLATION
        )
        self._state = AggregatorState.STANDALONE if standalone else AggregatorState.AWAITING_ORIGIN

    def _add_stop(self, record: LocationIntermediateRecord | LocationTerminusRecord) -> None:
        stop = _stop(record)
        partial = self._partial
        if partial.pending_change is not None:
            stop = stop.model_copy(update={"change_en_route": partial.pending_change})
            partial.pending_change = None
        partial.stops.append(stop)

    def _change_en_route(self, record: ChangeEnRouteRecord) -> None:
        change = ChangeEnRoute(
            characteristics=_characteristics(record),
            traction_class=record.traction_class,
            uic_code=record.uic_code,
            retail_service_id=record.retail_service_id,
        )
        partial = self._partial
        last = partial.stops[-1]
        if (
            last.kind is StopKind.INTERMEDIATE
            and last.change_en_route is None
            and (last.tiploc, last.tiploc_suffix) == (record.location, record.tiploc_suffix)
        ):
            partial.stops[-1] = last.model_copy(update={"change_en_route": change})
        else:
            partial.pending_change = change

    def _emit(self, out: list[AggregatorItem]) -> None:
        partial = self._partial
        header = partial.header
        key = ScheduleKey(
            train_uid=header.train_uid,
            stp_indicator=header.stp_indicator,
            runs_from=header.date_runs_from,
        )
        schedule = None
        if header.transaction_type is not TransactionType.DELETE:
            schedule = build_schedule(header, partial.extra, partial.stops)
        out.append(ScheduleRecord(
            transaction_type=header.transaction_type,
            key=key,
            schedule=schedule,
            line_number=header.line_number,
        ))
        self._reset()
        self._discarding = None

    def _break(self, record: Record, out: list[AggregatorItem]) -> None:
        partial = self._partial
        if self._discarding is not None:
            # still inside a damaged region: widen the open issue
            issue = self._discarding
            _absorb(issue, partial)
        else:
            issue = CifIssue(
                kind=ErrorKind.MALFORMED_SCHEDULE_SEQUENCE,
                message=(
                    f"{record.record_type} record not allowed in state {self._state.value}; "
                    f"schedule {partial.header.train_uid} from line {partial.header.line_number} dropped"
                ),
                line_number=record.line_number,
                raw=encode_record(record),
                record_type=record.record_type,
                key=partial.header.train_uid,
                discarded_lines=list(partial.lines),
            )
            out.append(issue)
        self._reset()
        self._discarding = issue
        if record.record_type in _BODY_TYPES:
            issue.discarded_lines.append(record.line_number)
        else:
            self._step(record, out)

    def _orphan(self, record: Record, out: list[AggregatorItem]) -> None:
        if self._discarding is not None:
            self._discarding.discarded_lines.append(record.line_number)
            return
        issue = CifIssue(
            kind=ErrorKind.MALFORMED_SCHEDULE_SEQUENCE,
            message=f"{record.record_type} record outside a schedule",
            line_number=record.line_number,
            raw=encode_record(record),
            record_type=record.record_type,
            discarded_lines=[record.line_number],
        )
        out.append(issue)
        self._discarding = issue

    def _reset(self) -> None:
        self._state = AggregatorState.AWAITING_SCHEDULE
        self._partial = None
