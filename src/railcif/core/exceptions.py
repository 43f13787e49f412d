"""railcif exception hierarchy.

Expected input problems are carried as ``CifIssue`` values; the exceptions
below wrap an issue when it has to travel up the stack (internally between a
decoder and the pipeline, or out to the caller in fail-fast mode).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from railcif.models.issues import CifIssue


class RailCifError(Exception):
    """Base exception for all railcif errors."""


class CifFormatError(RailCifError):
    """A physical line or run of lines violates the fixed-format contract."""

    def __init__(self, issue: CifIssue) -> None:
        self.issue = issue
        super().__init__(issue.describe())


class ScheduleApplyError(RailCifError):
    """A well-formed record cannot be applied to the current database state."""

    def __init__(self, issue: CifIssue) -> None:
        self.issue = issue
        super().__init__(issue.describe())


class InvariantViolation(RailCifError, AssertionError):
    """Internal defect: state that well-formed input can never produce.

    Raised, never collected. Seeing one means a bug in railcif itself, for
    example a non-cancellation Schedule without Origin/Terminus reaching the
    database, or two schedules of the same STP level resolving for one date.
    """
