"""STP precedence and overlap checks for the schedules of one Train UID.

Highest to lowest: Cancellation, Overlay, New, Permanent. Lower levels are
never cut or deleted when a higher one arrives; resolution happens per date at
query time.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional

from railcif.core.exceptions import InvariantViolation
from railcif.models.entities import Schedule


def running_on(schedules: Iterable[Schedule], day: date) -> list[Schedule]:
    return [schedule for schedule in schedules if schedule.runs_on(day)]


def resolve_on(schedules: Iterable[Schedule], day: date) -> Optional[Schedule]:
    """Pick the highest-precedence schedule running on ``day``.

    Raises:
        InvariantViolation: two schedules of the top level both run on
            ``day``; the database rejects that state on the way in.
    """
    candidates = running_on(schedules, day)
    if not candidates:
        return None
    top = max(schedule.stp_indicator.precedence for schedule in candidates)
    winners = [s for s in candidates if s.stp_indicator.precedence == top]
    if len(winners) > 1:
        keys = ", ".join(str(s.key) for s in winners)
        raise InvariantViolation(f"{len(winners)} schedules share precedence on {day}: {keys}")
    return winners[0]


def same_level_conflicts(candidate: Schedule, others: Iterable[Schedule]) -> list[Schedule]:
    """Schedules at the candidate's STP level sharing a running date with it."""
    return [
        other for other in others
        if other.stp_indicator is candidate.stp_indicator
        and candidate.window.shares_running_day(other.window)
    ]


def _boundaries(candidate: Schedule, others: Sequence[Schedule]) -> list[int]:
    # ordinals where the set of covering windows can change, clipped to the candidate
    first = candidate.runs_from.toordinal()
    last = candidate.runs_to.toordinal()
    points = {first, last + 1}
    for other in others:
        for point in (other.runs_from.toordinal(), other.runs_to.toordinal() + 1):
            if first < point <= last:
                points.add(point)
    return sorted(points)


def overlay_depth_violation(
    candidate: Schedule,
    others: Sequence[Schedule],
    max_depth: int,
) -> Optional[tuple[date, list[Schedule]]]:
    """First running date of ``candidate`` covered by more than ``max_depth``
    distinct STP levels, with the other schedules running that day."""
    overlapping = [s for s in others if candidate.window.shares_running_day(s.window)]
    levels = {candidate.stp_indicator} | {s.stp_indicator for s in overlapping}
    if len(levels) <= max_depth:
        return None

    points = _boundaries(candidate, overlapping)
    for start, stop in zip(points, points[1:]):
        covering = [s for s in overlapping if s.window.contains(date.fromordinal(start))]
        # within a segment only the weekday varies
        for ordinal in range(start, min(stop, start + 7)):
            day = date.fromordinal(ordinal)
            if not candidate.runs_on(day):
                continue
            present = [s for s in covering if s.window.days.runs_on(day)]
            if len({candidate.stp_indicator} | {s.stp_indicator for s in present}) > max_depth:
                return day, present
    return None
