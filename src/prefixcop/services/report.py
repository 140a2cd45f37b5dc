"""Report and ViolationAggregator — one ordered report per run.

Validation tasks run on a worker pool and hand their results to the
aggregator concurrently. Each result is filed under the discovery index
of its interface, so the final report orders entries by interface
discovery, then implementor discovery, however the tasks interleave.
No deduplication: a type breaking two interfaces is reported twice.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from prefixcop.domain.model import MalformedConstraint, Violation
from prefixcop.domain.types import IssueKind


@dataclass(frozen=True)
class ReportEntry:
    """One human-readable line of the report plus its structured fields."""

    kind: IssueKind
    message: str
    interface: str
    type: str | None = None
    prefix: str | None = None

    @classmethod
    def from_violation(cls, violation: Violation) -> ReportEntry:
        return cls(
            kind=IssueKind.VIOLATION,
            message=violation.message,
            interface=violation.interface.fqn,
            type=violation.implementor.fqn,
            prefix=violation.prefix,
        )

    @classmethod
    def from_malformed(cls, malformed: MalformedConstraint) -> ReportEntry:
        return cls(
            kind=IssueKind.MALFORMED,
            message=malformed.message,
            interface=malformed.interface.fqn,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": str(self.kind),
            "message": self.message,
            "interface": self.interface,
            "type": self.type,
            "prefix": self.prefix,
        }


@dataclass(frozen=True)
class Report:
    """Ordered report lines for one run."""

    entries: tuple[ReportEntry, ...] = ()

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def lines(self) -> list[str]:
        return [entry.message for entry in self.entries]

    @property
    def violations(self) -> list[ReportEntry]:
        return [e for e in self.entries if e.kind is IssueKind.VIOLATION]

    @property
    def malformed(self) -> list[ReportEntry]:
        return [e for e in self.entries if e.kind is IssueKind.MALFORMED]

    def summary(self) -> str:
        """Headline of the report; malformed markers are counted apart."""
        malformed = len(self.malformed)
        if not malformed:
            return f"{len(self.violations)} prefix violations found:"
        noun = "marker" if malformed == 1 else "markers"
        return f"{len(self.violations)} prefix violations found ({malformed} malformed {noun}):"

    def render(self) -> str:
        """Summary line followed by every entry, newline separated."""
        return "\n".join([self.summary(), *self.lines])


class ViolationAggregator:
    """Thread-safe collector turning per-interface results into a Report."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[int, list[ReportEntry]] = {}

    def add_violations(self, index: int, violations: Iterable[Violation]) -> None:
        entries = [ReportEntry.from_violation(v) for v in violations]
        with self._lock:
            self._buckets.setdefault(index, []).extend(entries)

    def add_malformed(self, index: int, malformed: MalformedConstraint) -> None:
        entry = ReportEntry.from_malformed(malformed)
        with self._lock:
            self._buckets.setdefault(index, []).append(entry)

    def report(self) -> Report:
        with self._lock:
            ordered = [entry for index in sorted(self._buckets) for entry in self._buckets[index]]
        return Report(entries=tuple(ordered))
