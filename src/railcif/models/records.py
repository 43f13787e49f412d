"""Physical CIF records — one model per 80-column record type.

Each model carries only the fields defined for its record type. Text fields
are stored with trailing padding removed; blank optional fields are ``None``.
``line_number`` is the 1-based position of the line in its source, or 0 when
the record was built by hand. Fields whose column text was not the canonical
spelling of their value (space-padded numbers, gapped flags, filled spare
columns) keep that text privately so ``encode_record`` reproduces the line.
"""

from __future__ import annotations

from datetime import date, time
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr

from railcif.models.calendar import DaysRun, JourneyTime
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
    UpdateIndicator,
)


class _Record(BaseModel):
    model_config = {"frozen": True}

    line_number: int = 0
    # column text of fields decoded from a non-canonical spelling, by field name
    _spellings: dict[str, str] = PrivateAttr(default_factory=dict)


class HeaderRecord(_Record):
    """HD — file header."""

    record_type: Literal["HD"] = "HD"
    file_mainframe_identity: str = ""
    date_of_extract: date
    time_of_extract: time
    current_file_reference: str = ""
    last_file_reference: str = ""
    update_indicator: UpdateIndicator = UpdateIndicator.UPDATE
    version: str = ""
    user_start_date: date
    user_end_date: date


class _TiplocDetails(_Record):
    tiploc: str
    capitals_identification: Optional[int] = None
    nlc: Optional[int] = None
    nlc_check_char: str = ""
    tps_description: str = ""
    stanox: Optional[int] = None
    po_mcp_code: Optional[int] = None
    crs_code: str = ""
    nlc_description: str = ""


class TiplocInsertRecord(_TiplocDetails):
    """TI — new timing point location."""

    record_type: Literal["TI"] = "TI"


class TiplocAmendRecord(_TiplocDetails):
    """TA — amended timing point location, optionally renamed."""

    record_type: Literal["TA"] = "TA"
    new_tiploc: str = ""


class TiplocDeleteRecord(_Record):
    """TD — removed timing point location."""

    record_type: Literal["TD"] = "TD"
    tiploc: str


class AssociationRecord(_Record):
    """AA — join/divide/next association between two trains."""

    record_type: Literal["AA"] = "AA"
    transaction_type: TransactionType
    main_train_uid: str
    associated_train_uid: str
    start_date: date
    end_date: Optional[date] = None
    days: Optional[DaysRun] = None
    category: Optional[AssociationCategory] = None
    date_indicator: Optional[AssociationDateIndicator] = None
    location: str = ""
    base_location_suffix: str = ""
    associated_location_suffix: str = ""
    diagram_type: str = ""
    association_type: Optional[AssociationType] = None
    stp_indicator: StpIndicator


class _ServiceDetails(_Record):
    """Fields shared by the schedule header and change-en-route records."""

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


class BasicScheduleRecord(_ServiceDetails):
    """BS — header of one schedule run."""

    record_type: Literal["BS"] = "BS"
    transaction_type: TransactionType
    train_uid: str
    date_runs_from: date
    date_runs_to: Optional[date] = None
    days_run: Optional[DaysRun] = None
    bank_holiday_running: Optional[BankHolidayRunning] = None
    train_status: Optional[TrainStatus] = None
    stp_indicator: StpIndicator


class BasicScheduleExtraRecord(_Record):
    """BX — extra schedule details."""

    record_type: Literal["BX"] = "BX"
    traction_class: str = ""
    uic_code: str = ""
    atoc_code: str = ""
    applicable_timetable_code: str = ""
    retail_service_id: str = ""


class _LocationRecord(_Record):
    location: str
    tiploc_suffix: str = ""


class LocationOriginRecord(_LocationRecord):
    """LO — first stop of a journey."""

    record_type: Literal["LO"] = "LO"
    scheduled_departure: JourneyTime
    public_departure: Optional[JourneyTime] = None
    platform: str = ""
    line: str = ""
    engineering_allowance: str = ""
    pathing_allowance: str = ""
    activity: str = ""
    performance_allowance: str = ""


class LocationIntermediateRecord(_LocationRecord):
    """LI — calling or passing point."""

    record_type: Literal["LI"] = "LI"
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


class LocationTerminusRecord(_LocationRecord):
    """LT — final stop of a journey."""

    record_type: Literal["LT"] = "LT"
    scheduled_arrival: JourneyTime
    public_arrival: Optional[JourneyTime] = None
    platform: str = ""
    path: str = ""
    activity: str = ""


class ChangeEnRouteRecord(_ServiceDetails):
    """CR — service characteristics change from a location onwards."""

    record_type: Literal["CR"] = "CR"
    location: str
    tiploc_suffix: str = ""
    traction_class: str = ""
    uic_code: str = ""
    retail_service_id: str = ""


class TrailerRecord(_Record):
    """ZZ — end of file."""

    record_type: Literal["ZZ"] = "ZZ"


Record = Annotated[
    Union[
        HeaderRecord,
        TiplocInsertRecord,
        TiplocAmendRecord,
        TiplocDeleteRecord,
        AssociationRecord,
        BasicScheduleRecord,
        BasicScheduleExtraRecord,
        LocationOriginRecord,
        LocationIntermediateRecord,
        LocationTerminusRecord,
        ChangeEnRouteRecord,
        TrailerRecord,
    ],
    Field(discriminator="record_type"),
]

LocationRecord = Union[LocationOriginRecord, LocationIntermediateRecord, LocationTerminusRecord]
