"""Column layouts, one per record type.

Offsets are 0-based and every layout covers columns 2..80 exactly; the
record identity occupies columns 0..2.
"""

from __future__ import annotations

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
from railcif.models.records import (
    AssociationRecord,
    BasicScheduleExtraRecord,
    BasicScheduleRecord,
    ChangeEnRouteRecord,
    HeaderRecord,
    LocationIntermediateRecord,
    LocationOriginRecord,
    LocationTerminusRecord,
    TiplocAmendRecord,
    TiplocDeleteRecord,
    TiplocInsertRecord,
    TrailerRecord,
)
from railcif.parser.fields import FieldKind as K
from railcif.parser.fields import FieldSpec as F


def _spare(offset: int, length: int) -> F:
    return F(f"spare_{offset}", offset, length, K.SPARE)


_TIPLOC_DETAILS = (
    F("tiploc", 2, 7, required=True),
    F("capitals_identification", 9, 2, K.INT),
    F("nlc", 11, 6, K.INT),
    F("nlc_check_char", 17, 1),
    F("tps_description", 18, 26),
    F("stanox", 44, 5, K.INT),
    F("po_mcp_code", 49, 4, K.INT, pad=" "),
    F("crs_code", 53, 3),
    F("nlc_description", 56, 16),
)

# Shared by BS (offset 30) and CR (offset 10): category .. service branding.
def _service_details(base: int) -> tuple[F, ...]:
    return (
        F("train_category", base, 2, K.CODE, TrainCategory),
        F("train_identity", base + 2, 4),
        F("headcode", base + 6, 4),
        F("course_indicator", base + 10, 1),
        F("train_service_code", base + 11, 8),
        F("portion_id", base + 19, 1),
        F("power_type", base + 20, 3, K.CODE, PowerType),
        F("timing_load", base + 23, 4),
        F("speed", base + 27, 3, K.INT),
        F("operating_characteristics", base + 30, 6, K.FLAGS, OperatingCharacteristic),
        F("seating_class", base + 36, 1, K.CODE, SeatingClass),
        F("sleepers", base + 37, 1, K.CODE, Sleepers),
        F("reservations", base + 38, 1, K.CODE, Reservations),
        F("connection_indicator", base + 39, 1),
        F("catering", base + 40, 4, K.FLAGS, Catering),
        F("service_branding", base + 44, 4),
    )


LAYOUTS: dict[str, tuple[type, tuple[F, ...]]] = {
    "HD": (HeaderRecord, (
        F("file_mainframe_identity", 2, 20),
        F("date_of_extract", 22, 6, K.DATE_DDMMYY, required=True),
        F("time_of_extract", 28, 4, K.TIME_HHMM, required=True),
        F("current_file_reference", 32, 7),
        F("last_file_reference", 39, 7),
        F("update_indicator", 46, 1, K.CODE, UpdateIndicator, required=True),
        F("version", 47, 1),
        F("user_start_date", 48, 6, K.DATE_DDMMYY, required=True),
        F("user_end_date", 54, 6, K.DATE_DDMMYY, required=True),
        _spare(60, 20),
    )),
    "TI": (TiplocInsertRecord, (
        *_TIPLOC_DETAILS,
        _spare(72, 8),
    )),
    "TA": (TiplocAmendRecord, (
        *_TIPLOC_DETAILS,
        F("new_tiploc", 72, 7),
        _spare(79, 1),
    )),
    "TD": (TiplocDeleteRecord, (
        F("tiploc", 2, 7, required=True),
        _spare(9, 71),
    )),
    "AA": (AssociationRecord, (
        F("transaction_type", 2, 1, K.CODE, TransactionType, required=True),
        F("main_train_uid", 3, 6, required=True),
        F("associated_train_uid", 9, 6, required=True),
        F("start_date", 15, 6, K.DATE_YYMMDD, required=True),
        F("end_date", 21, 6, K.DATE_YYMMDD),
        F("days", 27, 7, K.DAYS),
        F("category", 34, 2, K.CODE, AssociationCategory),
        F("date_indicator", 36, 1, K.CODE, AssociationDateIndicator),
        F("location", 37, 7),
        F("base_location_suffix", 44, 1),
        F("associated_location_suffix", 45, 1),
        F("diagram_type", 46, 1),
        F("association_type", 47, 1, K.CODE, AssociationType),
        _spare(48, 31),
        F("stp_indicator", 79, 1, K.CODE, StpIndicator, required=True),
    )),
    "BS": (BasicScheduleRecord, (
        F("transaction_type", 2, 1, K.CODE, TransactionType, required=True),
        F("train_uid", 3, 6, required=True),
        F("date_runs_from", 9, 6, K.DATE_YYMMDD, required=True),
        F("date_runs_to", 15, 6, K.DATE_YYMMDD),
        F("days_run", 21, 7, K.DAYS),
        F("bank_holiday_running", 28, 1, K.CODE, BankHolidayRunning),
        F("train_status", 29, 1, K.CODE, TrainStatus),
        *_service_details(30),
        _spare(78, 1),
        F("stp_indicator", 79, 1, K.CODE, StpIndicator, required=True),
    )),
    "BX": (BasicScheduleExtraRecord, (
        F("traction_class", 2, 4),
        F("uic_code", 6, 5),
        F("atoc_code", 11, 2),
        F("applicable_timetable_code", 13, 1),
        F("retail_service_id", 14, 8),
        _spare(22, 58),
    )),
    "LO": (LocationOriginRecord, (
        F("location", 2, 7, required=True),
        F("tiploc_suffix", 9, 1),
        F("scheduled_departure", 10, 5, K.JOURNEY_TIME, required=True),
        F("public_departure", 15, 4, K.JOURNEY_TIME),
        F("platform", 19, 3),
        F("line", 22, 3),
        F("engineering_allowance", 25, 2),
        F("pathing_allowance", 27, 2),
        F("activity", 29, 12),
        F("performance_allowance", 41, 2),
        _spare(43, 37),
    )),
    "LI": (LocationIntermediateRecord, (
        F("location", 2, 7, required=True),
        F("tiploc_suffix", 9, 1),
        F("scheduled_arrival", 10, 5, K.JOURNEY_TIME),
        F("scheduled_departure", 15, 5, K.JOURNEY_TIME),
        F("scheduled_pass", 20, 5, K.JOURNEY_TIME),
        F("public_arrival", 25, 4, K.JOURNEY_TIME),
        F("public_departure", 29, 4, K.JOURNEY_TIME),
        F("platform", 33, 3),
        F("line", 36, 3),
        F("path", 39, 3),
        F("activity", 42, 12),
        F("engineering_allowance", 54, 2),
        F("pathing_allowance", 56, 2),
        F("performance_allowance", 58, 2),
        _spare(60, 20),
    )),
    "LT": (LocationTerminusRecord, (
        F("location", 2, 7, required=True),
        F("tiploc_suffix", 9, 1),
        F("scheduled_arrival", 10, 5, K.JOURNEY_TIME, required=True),
        F("public_arrival", 15, 4, K.JOURNEY_TIME),
        F("platform", 19, 3),
        F("path", 22, 3),
        F("activity", 25, 12),
        _spare(37, 43),
    )),
    "CR": (ChangeEnRouteRecord, (
        F("location", 2, 7, required=True),
        F("tiploc_suffix", 9, 1),
        *_service_details(10),
        F("traction_class", 58, 4),
        F("uic_code", 62, 5),
        F("retail_service_id", 67, 8),
        _spare(75, 5),
    )),
    "ZZ": (TrailerRecord, (
        _spare(2, 78),
    )),
}
