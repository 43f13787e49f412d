"""Error collector — accumulates issues, or raises on the first in fail-fast mode."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator

from railcif.core.exceptions import CifFormatError, ScheduleApplyError
from railcif.models.issues import CifIssue, ErrorKind, IssueCategory

logger = logging.getLogger(__name__)


class ErrorCollector:
    """Ordered sink for ``CifIssue`` values.

    With ``fail_fast`` set, ``add`` raises instead of storing: structural
    issues as ``CifFormatError``, transaction issues as ``ScheduleApplyError``.
    """

    def __init__(self, fail_fast: bool = False) -> None:
        self.fail_fast = fail_fast
        self._issues: list[CifIssue] = []

    def add(self, issue: CifIssue) -> None:
        logger.warning(
            issue.describe(),
            extra={"event": "issue", "kind": issue.kind.value, "line_number": issue.line_number},
        )
        if self.fail_fast:
            if issue.category is IssueCategory.TRANSACTION:
                raise ScheduleApplyError(issue)
            raise CifFormatError(issue)
        self._issues.append(issue)

    @property
    def issues(self) -> list[CifIssue]:
        return list(self._issues)

    @property
    def count(self) -> int:
        return len(self._issues)

    def by_kind(self) -> dict[ErrorKind, int]:
        return dict(Counter(issue.kind for issue in self._issues))

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[CifIssue]:
        return iter(self._issues)
