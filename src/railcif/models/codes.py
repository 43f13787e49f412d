"""Closed code tables for coded CIF fields.

Member values are the literal characters found in the file, so
``TrainStatus("P")`` decodes and ``.value`` re-encodes. A blank field decodes
to ``None`` rather than to a member.
"""

from __future__ import annotations

from enum import StrEnum


class TransactionType(StrEnum):
    NEW = "N"
    DELETE = "D"
    REVISE = "R"


class StpIndicator(StrEnum):
    CANCELLATION = "C"
    NEW = "N"
    OVERLAY = "O"
    PERMANENT = "P"

    @property
    def precedence(self) -> int:
        """Higher wins when validity windows overlap on a running date."""
        return _STP_PRECEDENCE[self]


_STP_PRECEDENCE = {
    StpIndicator.CANCELLATION: 4,
    StpIndicator.OVERLAY: 3,
    StpIndicator.NEW: 2,
    StpIndicator.PERMANENT: 1,
}


class UpdateIndicator(StrEnum):
    UPDATE = "U"
    FULL = "F"


class BankHolidayRunning(StrEnum):
    NOT_ON_BANK_HOLIDAY_MONDAYS = "X"
    NOT_ON_GLASGOW_BANK_HOLIDAYS = "G"


class TrainStatus(StrEnum):
    BUS = "B"
    FREIGHT = "F"
    PASSENGER_AND_PARCELS = "P"
    SHIP = "S"
    TRIP = "T"
    STP_PASSENGER_AND_PARCELS = "1"
    STP_FREIGHT = "2"
    STP_TRIP = "3"
    STP_SHIP = "4"
    STP_BUS = "5"


class TrainCategory(StrEnum):
    LONDON_UNDERGROUND = "OL"
    UNADVERTISED_ORDINARY_PASSENGER = "OU"
    ORDINARY_PASSENGER = "OO"
    STAFF_TRAIN = "OS"
    MIXED = "OW"
    CHANNEL_TUNNEL = "XC"
    SLEEPER_EUROPE = "XD"
    INTERNATIONAL = "XI"
    MOTORAIL = "XR"
    UNADVERTISED_EXPRESS = "XU"
    EXPRESS_PASSENGER = "XX"
    SLEEPER_DOMESTIC = "XZ"
    BUS_REPLACEMENT = "BR"
    BUS_WTT_SERVICE = "BS"
    SHIP = "SS"
    EMPTY_COACHING_STOCK = "EE"
    ECS_LONDON_UNDERGROUND = "EL"
    ECS_AND_STAFF = "ES"
    POSTAL = "JJ"
    POST_OFFICE_PARCELS = "PM"
    PARCELS = "PP"
    EMPTY_NPCCS = "PV"
    DEPARTMENTAL = "DD"
    CIVIL_ENGINEER = "DH"
    MECHANICAL_AND_ELECTRICAL_ENGINEER = "DI"
    STORES = "DQ"
    TEST = "DT"
    SIGNAL_AND_TELECOMMUNICATIONS_ENGINEER = "DY"
    LOCOMOTIVE_AND_BRAKE_VAN = "ZB"
    LIGHT_LOCOMOTIVE = "ZZ"
    RFD_AUTOMOTIVE_COMPONENTS = "J2"
    RFD_AUTOMOTIVE_VEHICLES = "H2"
    RFD_EDIBLE_PRODUCTS = "J3"
    RFD_INDUSTRIAL_MINERALS = "J4"
    RFD_CHEMICALS = "J5"
    RFD_BUILDING_MATERIALS = "J6"
    RFD_GENERAL_MERCHANDISE = "J8"
    RFD_EUROPEAN = "H8"
    RFD_FREIGHTLINER_CONTRACTS = "J9"
    RFD_FREIGHTLINER_OTHER = "H9"
    COAL_DISTRIBUTIVE = "A0"
    COAL_ELECTRICITY_MGR = "E0"
    COAL_OTHER_AND_NUCLEAR = "B0"
    METALS = "B1"
    AGGREGATES = "B4"
    DOMESTIC_AND_INDUSTRIAL_WASTE = "B5"
    BUILDING_MATERIALS = "B6"
    PETROLEUM_PRODUCTS = "B7"
    CHANNEL_TUNNEL_MIXED_BUSINESS = "H0"
    CHANNEL_TUNNEL_INTERMODAL = "H1"
    CHANNEL_TUNNEL_AUTOMOTIVE = "H3"
    CHANNEL_TUNNEL_CONTRACT_SERVICES = "H4"
    CHANNEL_TUNNEL_HAULMARK = "H5"
    CHANNEL_TUNNEL_JOINT_VENTURE = "H6"


class PowerType(StrEnum):
    DIESEL = "D"
    DIESEL_ELECTRIC_MULTIPLE_UNIT = "DEM"
    DIESEL_MECHANICAL_MULTIPLE_UNIT = "DMU"
    ELECTRIC = "E"
    ELECTRO_DIESEL = "ED"
    EMU_PLUS_LOCOMOTIVE = "EML"
    ELECTRIC_MULTIPLE_UNIT = "EMU"
    HIGH_SPEED_TRAIN = "HST"


class OperatingCharacteristic(StrEnum):
    VACUUM_BRAKED = "B"
    TIMED_AT_100_MPH = "C"
    DOO_COACHING_STOCK = "D"
    CONVEYS_MARK_4_COACHES = "E"
    GUARD_REQUIRED = "G"
    TIMED_AT_110_MPH = "M"
    PUSH_PULL = "P"
    RUNS_AS_REQUIRED = "Q"
    AIR_CONDITIONED_WITH_PA = "R"
    STEAM_HEATED = "S"
    RUNS_TO_TERMINALS_AS_REQUIRED = "Y"
    SB1C_GAUGE = "Z"


class SeatingClass(StrEnum):
    FIRST_AND_STANDARD = "B"
    STANDARD_ONLY = "S"


class Sleepers(StrEnum):
    FIRST_AND_STANDARD = "B"
    FIRST_ONLY = "F"
    STANDARD_ONLY = "S"


class Reservations(StrEnum):
    COMPULSORY = "A"
    BICYCLES_ESSENTIAL = "E"
    RECOMMENDED = "R"
    POSSIBLE = "S"


class Catering(StrEnum):
    BUFFET = "C"
    FIRST_CLASS_RESTAURANT = "F"
    HOT_FOOD = "H"
    FIRST_CLASS_MEAL = "M"
    WHEELCHAIR_RESERVATIONS = "P"
    RESTAURANT = "R"
    TROLLEY = "T"


class AssociationCategory(StrEnum):
    JOIN = "JJ"
    DIVIDE = "VV"
    NEXT = "NP"


class AssociationDateIndicator(StrEnum):
    STANDARD = "S"
    OVER_NEXT_MIDNIGHT = "N"
    OVER_PREVIOUS_MIDNIGHT = "P"


class AssociationType(StrEnum):
    PASSENGER = "P"
    OPERATING = "O"
