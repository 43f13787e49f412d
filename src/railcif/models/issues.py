"""Diagnostics and reporting models: issues, apply reports, apply events."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from railcif.models.entities import EntityKind, LogicalRecord


class ErrorKind(StrEnum):
    # structural
    TRUNCATED_LINE = "TruncatedLine"
    ILLEGAL_CHARACTER = "IllegalCharacter"
    MALFORMED_FIELD = "MalformedField"
    UNKNOWN_RECORD_TYPE = "UnknownRecordType"
    MALFORMED_SCHEDULE_SEQUENCE = "MalformedScheduleSequence"
    # transaction
    DUPLICATE_KEY = "DuplicateKey"
    UNKNOWN_KEY_FOR_REVISION = "UnknownKeyForRevision"
    UNKNOWN_KEY_FOR_DELETION = "UnknownKeyForDeletion"
    CONFLICTING_SCHEDULE = "ConflictingSchedule"


class IssueCategory(StrEnum):
    STRUCTURAL = "structural"
    TRANSACTION = "transaction"


_TRANSACTION_KINDS = frozenset({
    ErrorKind.DUPLICATE_KEY,
    ErrorKind.UNKNOWN_KEY_FOR_REVISION,
    ErrorKind.UNKNOWN_KEY_FOR_DELETION,
    ErrorKind.CONFLICTING_SCHEDULE,
})


class CifIssue(BaseModel):
    """One parse or apply failure, tied to the line that produced it."""

    kind: ErrorKind
    message: str
    line_number: Optional[int] = None
    raw: str = ""
    record_type: Optional[str] = None
    field: Optional[str] = None
    offset: Optional[int] = None
    field_text: Optional[str] = None
    key: Optional[str] = None
    related_keys: list[str] = Field(default_factory=list)
    discarded_lines: list[int] = Field(default_factory=list)

    @property
    def category(self) -> IssueCategory:
        if self.kind in _TRANSACTION_KINDS:
            return IssueCategory.TRANSACTION
        return IssueCategory.STRUCTURAL

    def describe(self) -> str:
        where = f"line {self.line_number}" if self.line_number is not None else "input"
        parts = [f"{self.kind.value} at {where}: {self.message}"]
        if self.field is not None:
            parts.append(f"field={self.field!r} offset={self.offset} text={self.field_text!r}")
        if self.key is not None:
            parts.append(f"key={self.key}")
        return " ".join(parts)


class EntityCounts(BaseModel):
    inserted: int = 0
    revised: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.revised + self.deleted


class ApplyReport(BaseModel):
    """Outcome of one ``ScheduleDatabase.apply`` call."""

    tiplocs: EntityCounts = Field(default_factory=EntityCounts)
    associations: EntityCounts = Field(default_factory=EntityCounts)
    schedules: EntityCounts = Field(default_factory=EntityCounts)
    records_applied: int = 0
    records_failed: int = 0
    issues: list[CifIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def counts_for(self, entity: EntityKind) -> EntityCounts:
        match entity:
            case EntityKind.TIPLOC:
                return self.tiplocs
            case EntityKind.ASSOCIATION:
                return self.associations
            case EntityKind.SCHEDULE:
                return self.schedules


class ParsedFile(BaseModel):
    """Eager result of ``parse``: every logical record plus every issue."""

    records: list[LogicalRecord] = Field(default_factory=list)
    issues: list[CifIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


class EventOutcome(StrEnum):
    INSERTED = "inserted"
    REVISED = "revised"
    DELETED = "deleted"
    RESET = "reset"
    NOTED = "noted"  # header/trailer bookkeeping
    REJECTED = "rejected"


class ApplyEvent(BaseModel):
    """Structured, log-worthy outcome of applying one logical record."""

    line_number: Optional[int] = None
    record_type: str
    outcome: EventOutcome
    entity: Optional[EntityKind] = None
    key: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
