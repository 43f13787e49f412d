"""Resolved entities owned by the schedule database, plus the logical
``ScheduleRecord`` the continuation aggregator hands to it."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Literal, Optional, Union

from pydantic import BaseModel, model_validator

from railcif.models.calendar import DaysRun, JourneyTime, ValidityWindow
from railcif.models.codes import (
    AssociationCategory,
    AssociationDateIndicator,
    AssociationType,
    BankHolidayRunning,
    Catering,
    OperatingCharacteristic,
    PowerType,
    Reservations,
    SeatingClass,
    Sleepers,
    StpIndicator,
    TrainCategory,
    TrainStatus,
    TransactionType,
)
from railcif.models.records import (
    AssociationRecord,
    HeaderRecord,
    TiplocAmendRecord,
    TiplocDeleteRecord,
    TiplocInsertRecord,
    TrailerRecord,
)


class EntityKind(StrEnum):
    TIPLOC = "tiploc"
    ASSOCIATION = "association"
    SCHEDULE = "schedule"


class StopKind(StrEnum):
    ORIGIN = "origin"
    INTERMEDIATE = "intermediate"
    TERMINUS = "terminus"


# ---------------------------------------------------------------------------
# TIPLOC
# ---------------------------------------------------------------------------

class Tiploc(BaseModel):
    """A timing point location."""

    model_config = {"frozen": True}

    tiploc: str
    capitals_identification: Optional[int] = None
    nlc: Optional[int] = None
    nlc_check_char: str = ""
    tps_description: str = ""
    stanox: Optional[int] = None
    po_mcp_code: Optional[int] = None
    crs_code: str = ""
    nlc_description: str = ""

    @classmethod
    def from_record(cls, record: TiplocInsertRecord | TiplocAmendRecord) -> Tiploc:
        code = record.tiploc
        if isinstance(record, TiplocAmendRecord) and record.new_tiploc:
            code = record.new_tiploc
        return cls(
            tiploc=code,
            capitals_identification=record.capitals_identification,
            nlc=record.nlc,
            nlc_check_char=record.nlc_check_char,
            tps_description=record.tps_description,
            stanox=record.stanox,
            po_mcp_code=record.po_mcp_code,
            crs_code=record.crs_code,
            nlc_description=record.nlc_description,
        )


# ---------------------------------------------------------------------------
# Association
# ---------------------------------------------------------------------------

class AssociationKey(BaseModel):
    model_config = {"frozen": True}

    main_train_uid: str
    associated_train_uid: str
    start_date: date
    location: str
    base_location_suffix: str = ""
    stp_indicator: StpIndicator

    def __str__(self) -> str:
        return (
            f"{self.main_train_uid}/{self.associated_train_uid}@{self.location}"
            f"{self.base_location_suffix} from {self.start_date} ({self.stp_indicator.value})"
        )


class Association(BaseModel):
    """Link between two trains (join, divide, next working)."""

    model_config = {"frozen": True}

    key: AssociationKey
    end_date: Optional[date] = None
    days: Optional[DaysRun] = None
    category: Optional[AssociationCategory] = None
    date_indicator: Optional[AssociationDateIndicator] = None
    associated_location_suffix: str = ""
    association_type: Optional[AssociationType] = None

    @staticmethod
    def key_of(record: AssociationRecord) -> AssociationKey:
        return AssociationKey(
            main_train_uid=record.main_train_uid,
            associated_train_uid=record.associated_train_uid,
            start_date=record.start_date,
            location=record.location,
            base_location_suffix=record.base_location_suffix,
            stp_indicator=record.stp_indicator,
        )

    @classmethod
    def from_record(cls, record: AssociationRecord) -> Association:
        return cls(
            key=cls.key_of(record),
            end_date=record.end_date,
            days=record.days,
            category=record.category,
            date_indicator=record.date_indicator,
            associated_location_suffix=record.associated_location_suffix,
            association_type=record.association_type,
        )


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------

class ServiceCharacteristics(BaseModel):
    """Train characteristics from a BS header, or as changed by a CR record."""

    model_config = {"frozen": True}

    train_category: Optional[TrainCategory] = None
    train_identity: str = ""
    headcode: str = ""
    course_indicator: str = ""
    train_service_code: str = ""
    portion_id: str = ""
    power_type: Optional[PowerType] = None
    timing_load: str = ""
    speed: Optional[int] = None
    operating_characteristics: tuple[OperatingCharacteristic, ...] = ()
    seating_class: Optional[SeatingClass] = None
    sleepers: Optional[Sleepers] = None
    reservations: Optional[Reservations] = None
    connection_indicator: str = ""
    catering: tuple[Catering, ...] = ()
    service_branding: str = ""


class ChangeEnRoute(BaseModel):
    """Characteristics that apply from the annotated stop onwards."""

    model_config = {"frozen": True}

    characteristics: ServiceCharacteristics
    traction_class: str = ""
    uic_code: str = ""
    retail_service_id: str = ""


class Stop(BaseModel):
    """One location in a schedule's journey."""

    model_config = {"frozen": True}

    kind: StopKind
    tiploc: str
    tiploc_suffix: str = ""
    scheduled_arrival: Optional[JourneyTime] = None
    scheduled_departure: Optional[JourneyTime] = None
    scheduled_pass: Optional[JourneyTime] = None
    public_arrival: Optional[JourneyTime] = None
    public_departure: Optional[JourneyTime] = None
    platform: str = ""
    line: str = ""
    path: str = ""
    activity: str = ""
    engineering_allowance: str = ""
    pathing_allowance: str = ""
    performance_allowance: str = ""
    change_en_route: Optional[ChangeEnRoute] = None

    @property
    def is_passing(self) -> bool:
        return self.scheduled_pass is not None


class ScheduleKey(BaseModel):
    """Composite identity used by Revise and Delete transactions."""

    model_config = {"frozen": True}

    train_uid: str
    stp_indicator: StpIndicator
    runs_from: date

    def __str__(self) -> str:
        return f"{self.train_uid}/{self.stp_indicator.value}/{self.runs_from.isoformat()}"


class Schedule(BaseModel):
    """One logical schedule: header details plus its ordered journey.

    Non-cancellation schedules always start with exactly one origin and end
    with exactly one terminus. Cancellations carry no journey.
    """

    model_config = {"frozen": True}

    train_uid: str
    stp_indicator: StpIndicator
    window: ValidityWindow
    bank_holiday_running: Optional[BankHolidayRunning] = None
    train_status: Optional[TrainStatus] = None
    characteristics: ServiceCharacteristics = ServiceCharacteristics()
    traction_class: str = ""
    uic_code: str = ""
    atoc_code: str = ""
    applicable_timetable: bool = False
    retail_service_id: str = ""
    stops: tuple[Stop, ...] = ()

    @model_validator(mode="after")
    def _check_journey(self) -> Schedule:
        if self.stp_indicator is StpIndicator.CANCELLATION:
            return self
        kinds = [stop.kind for stop in self.stops]
        if (
            len(kinds) < 2
            or kinds[0] is not StopKind.ORIGIN
            or kinds[-1] is not StopKind.TERMINUS
            or StopKind.ORIGIN in kinds[1:]
            or StopKind.TERMINUS in kinds[:-1]
        ):
            raise ValueError(
                f"schedule {self.train_uid} must run origin -> intermediates -> terminus, got {kinds}"
            )
        return self

    @property
    def key(self) -> ScheduleKey:
        return ScheduleKey(
            train_uid=self.train_uid,
            stp_indicator=self.stp_indicator,
            runs_from=self.window.start,
        )

    @property
    def runs_from(self) -> date:
        return self.window.start

    @property
    def runs_to(self) -> date:
        return self.window.end

    @property
    def is_cancellation(self) -> bool:
        return self.stp_indicator is StpIndicator.CANCELLATION

    @property
    def tiplocs(self) -> list[str]:
        return [stop.tiploc for stop in self.stops]

    def runs_on(self, day: date) -> bool:
        return self.window.runs_on(day)


class ScheduleRecord(BaseModel):
    """Logical record for one BS run, carrying its transaction type.

    ``schedule`` is ``None`` for Delete transactions, which only name a key.
    """

    model_config = {"frozen": True}

    record_type: Literal["SCHEDULE"] = "SCHEDULE"
    transaction_type: TransactionType
    key: ScheduleKey
    schedule: Optional[Schedule] = None
    line_number: int = 0


LogicalRecord = Union[
    HeaderRecord,
    TiplocInsertRecord,
    TiplocAmendRecord,
    TiplocDeleteRecord,
    AssociationRecord,
    ScheduleRecord,
    TrailerRecord,
]
