"""Date and time value types: running days, journey times, validity windows."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, model_validator

_WEEKDAY_BITS = (64, 32, 16, 8, 4, 2, 1)  # Monday first, as in the CIF days field


class DaysRun(BaseModel):
    """Weekly running-days bitmask. Monday is the high bit."""

    model_config = {"frozen": True}

    mask: int = Field(default=0, ge=0, le=127)

    @classmethod
    def from_cif(cls, text: str) -> DaysRun:
        """Build from the 7-character ``0``/``1`` field, Monday first."""
        mask = 0
        for bit, flag in zip(_WEEKDAY_BITS, text):
            if flag == "1":
                mask |= bit
        return cls(mask=mask)

    @classmethod
    def every_day(cls) -> DaysRun:
        return cls(mask=127)

    def to_cif(self) -> str:
        return "".join("1" if self.mask & bit else "0" for bit in _WEEKDAY_BITS)

    def runs_on_weekday(self, weekday: int) -> bool:
        """``weekday`` follows ``date.weekday()``: Monday == 0."""
        return bool(self.mask & _WEEKDAY_BITS[weekday])

    def runs_on(self, day: date) -> bool:
        return self.runs_on_weekday(day.weekday())

    def intersects(self, other: DaysRun) -> bool:
        return bool(self.mask & other.mask)


class JourneyTime(BaseModel):
    """A timetable time of day, optionally half a minute past."""

    model_config = {"frozen": True}

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)
    half: bool = False

    def to_cif(self, width: int = 5) -> str:
        text = f"{self.hour:02d}{self.minute:02d}"
        if width == 5:
            text += "H" if self.half else " "
        return text

    @property
    def seconds(self) -> int:
        """Seconds after midnight."""
        return self.hour * 3600 + self.minute * 60 + (30 if self.half else 0)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}{'H' if self.half else ''}"


class ValidityWindow(BaseModel):
    """Closed date range plus the weekly days the schedule runs within it."""

    model_config = {"frozen": True}

    start: date
    end: date
    days: DaysRun

    @model_validator(mode="after")
    def _check_order(self) -> ValidityWindow:
        if self.end < self.start:
            raise ValueError(f"window ends ({self.end}) before it starts ({self.start})")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def runs_on(self, day: date) -> bool:
        return self.contains(day) and self.days.runs_on(day)

    def overlaps(self, other: ValidityWindow) -> bool:
        """Date ranges overlap, regardless of running days."""
        return self.start <= other.end and other.start <= self.end

    def shares_running_day(self, other: ValidityWindow) -> bool:
        """True when at least one calendar date is a running date of both windows."""
        if not self.overlaps(other) or not self.days.intersects(other.days):
            return False
        first = max(self.start, other.start).toordinal()
        last = min(self.end, other.end).toordinal()
        if last - first >= 6:
            return True
        return any(
            self.days.runs_on(day) and other.days.runs_on(day)
            for day in map(date.fromordinal, range(first, last + 1))
        )
