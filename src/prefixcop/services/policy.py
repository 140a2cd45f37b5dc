"""PolicyEnforcer — turns a report into the build outcome.

Two states, fixed for the whole run:

* REPORTING (``fail_on_error=False``): every entry is logged as a
  warning and the run succeeds whatever the report holds.
* ENFORCING (``fail_on_error=True``): a non-empty report fails the run
  with the summary line and every entry as the error message.

Entries are always logged one by one before the decision, so both
states produce the same diagnostic text.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from prefixcop.domain.types import MalformedPolicy
from prefixcop.services.report import Report, ReportEntry
from prefixcop.services.result import ServiceResult

log = structlog.get_logger(__name__)

ERR_VIOLATIONS = "PREFIX_VIOLATIONS"
ERR_MALFORMED = "MALFORMED_CONSTRAINT"


class PolicyState(StrEnum):
    REPORTING = "reporting"
    ENFORCING = "enforcing"


@dataclass(frozen=True)
class PolicyEnforcer:
    """Applies the fail-on-error switch to an aggregated report."""

    fail_on_error: bool = True
    malformed_policy: MalformedPolicy = MalformedPolicy.AGGREGATE

    @property
    def state(self) -> PolicyState:
        return PolicyState.ENFORCING if self.fail_on_error else PolicyState.REPORTING

    @property
    def fails_fast(self) -> bool:
        """True when a malformed marker should stop the run where it is found."""
        return self.fail_on_error and self.malformed_policy is MalformedPolicy.FAIL_FAST

    def log_entries(self, entries: Iterable[ReportEntry]) -> None:
        for entry in entries:
            log.warning(
                entry.message,
                kind=str(entry.kind),
                interface=entry.interface,
                type=entry.type,
                prefix=entry.prefix,
            )

    def enforce(
        self,
        report: Report,
        *,
        op: str = "check",
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Log the report, then decide success or failure."""
        self.log_entries(report.entries)
        payload = {**(data or {}), "policy": str(self.state)}

        if report.is_empty:
            return ServiceResult(ok=True, op=op, data=payload, warnings=warnings or [])

        if self.state is PolicyState.REPORTING:
            log.warning(report.render())
            return ServiceResult(ok=True, op=op, data=payload, warnings=warnings or [])

        return ServiceResult.failure(
            op,
            ERR_VIOLATIONS,
            report.render(),
            detail={
                "count": report.count,
                "violations": len(report.violations),
                "malformed": len(report.malformed),
            },
            data=payload,
            warnings=warnings,
        )

    def fail_malformed(
        self,
        entry: ReportEntry,
        preceding: Report,
        *,
        op: str = "check",
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Fail immediately on a malformed marker (fail-fast policy).

        Violations of interfaces discovered before it are still logged
        and kept in the payload; later interfaces were never validated.
        """
        self.log_entries([*preceding.entries, entry])
        return ServiceResult.failure(
            op,
            ERR_MALFORMED,
            entry.message,
            detail={"interface": entry.interface, "preceding_violations": preceding.count},
            data={**(data or {}), "policy": str(self.state)},
            warnings=warnings,
        )
