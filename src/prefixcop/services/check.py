"""CheckService — prefix naming conventions over a scanned project.

Pipeline per run: resolve the output directory, scan it, extract the
constrained interfaces, validate their implementors on a worker pool
(one task per interface), aggregate, and hand the report to the
:class:`PolicyEnforcer` for the pass/fail decision.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

import structlog

from prefixcop.domain.model import Extraction, MalformedConstraint, PrefixConstraint
from prefixcop.domain.rules import extract_constraints, find_violations, has_required_prefix
from prefixcop.infrastructure.scanner import scan_types
from prefixcop.services.base import BaseService, ConfigurationError
from prefixcop.services.policy import PolicyEnforcer
from prefixcop.services.report import Report, ReportEntry, ViolationAggregator
from prefixcop.services.result import ServiceResult
from prefixcop.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from pathlib import Path

    from prefixcop.infrastructure.scanner import ScanResult

log = structlog.get_logger(__name__)


class CheckService(BaseService):
    """Runs the prefix check and the interface inventory."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def check(self) -> ServiceResult:
        """Validate every constrained interface and apply the error policy."""
        try:
            directory = self.resolve_output_directory()
        except ConfigurationError as exc:
            return _configuration_failure("check", exc)

        enforcer = PolicyEnforcer(
            fail_on_error=self._settings.check.fail_on_error,
            malformed_policy=self._settings.check.malformed_policy,
        )
        log.info("Scanning sources", directory=str(directory))

        pool = ThreadPoolExecutor(max_workers=self._max_workers())
        with pool, scan_types(
            directory,
            self._settings.scan.base_package,
            exclude=self._settings.scan.exclude,
            executor=pool,
        ) as scan:
            with trace_span("extract") as span:
                extractions = extract_constraints(scan.types)
                if span:
                    span.annotate("types", len(scan.types))
            log.info("Total interfaces found", count=len(extractions))
            found = len(extractions)

            halted_on: MalformedConstraint | None = None
            if enforcer.fails_fast:
                extractions, halted_on = _cut_at_first_malformed(extractions)

            with trace_span("validate") as span:
                aggregator = ViolationAggregator()
                checked = self._validate(pool, scan, extractions, aggregator)
                report = aggregator.report()
                if span:
                    span.annotate("implementors", checked)

            data = self._payload(directory, scan, found, checked, report)
            warnings = list(scan.skipped)

        with trace_span("enforce"):
            if halted_on is not None:
                return enforcer.fail_malformed(
                    ReportEntry.from_malformed(halted_on),
                    report,
                    data=data,
                    warnings=warnings,
                )
            return enforcer.enforce(report, data=data, warnings=warnings)

    @traced
    def interfaces(self) -> ServiceResult:
        """List constrained interfaces with their implementors.

        Inventory only: violations are shown per implementor but never
        fail the operation.
        """
        try:
            directory = self.resolve_output_directory()
        except ConfigurationError as exc:
            return _configuration_failure("interfaces", exc)

        items: list[dict[str, Any]] = []
        with scan_types(
            directory,
            self._settings.scan.base_package,
            exclude=self._settings.scan.exclude,
        ) as scan:
            for extraction in extract_constraints(scan.types):
                iface = extraction.interface
                if isinstance(extraction, MalformedConstraint):
                    items.append(
                        {"interface": iface.fqn, "prefix": None, "malformed": True, "implementors": []}
                    )
                    continue
                implementors = [
                    {"type": impl.fqn, "compliant": has_required_prefix(impl, extraction.prefix)}
                    for impl in scan.find_implementors(iface.fqn)
                ]
                items.append(
                    {
                        "interface": iface.fqn,
                        "prefix": extraction.prefix,
                        "malformed": False,
                        "implementors": implementors,
                    }
                )
            warnings = list(scan.skipped)

        return ServiceResult(
            ok=True,
            op="interfaces",
            data={"interfaces": items, "count": len(items)},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _max_workers(self) -> int:
        return self._settings.check.max_workers or os.cpu_count() or 1

    def _validate(
        self,
        pool: ThreadPoolExecutor,
        scan: ScanResult,
        extractions: list[Extraction],
        aggregator: ViolationAggregator,
    ) -> int:
        """Fan out one task per constraint and wait for all of them.

        Returns the number of implementors checked.
        """
        futures = []
        for index, extraction in enumerate(extractions):
            if isinstance(extraction, MalformedConstraint):
                aggregator.add_malformed(index, extraction)
            else:
                futures.append(pool.submit(_check_interface, scan, index, extraction, aggregator))
        wait(futures)
        # Re-raise the first task failure, if any.
        return sum(future.result() for future in futures)

    def _payload(
        self,
        directory: Path,
        scan: ScanResult,
        interfaces_found: int,
        checked: int,
        report: Report,
    ) -> dict[str, Any]:
        return {
            "output_directory": str(directory),
            "base_package": self._settings.scan.base_package,
            "files_scanned": scan.files_scanned,
            "types_scanned": len(scan.types),
            "interfaces_found": interfaces_found,
            "implementors_checked": checked,
            "fail_on_error": self._settings.check.fail_on_error,
            "issues": [entry.to_dict() for entry in report.entries],
            "count": report.count,
            "summary": report.summary(),
        }


def _check_interface(
    scan: ScanResult,
    index: int,
    constraint: PrefixConstraint,
    aggregator: ViolationAggregator,
) -> int:
    implementors = scan.find_implementors(constraint.interface.fqn)
    aggregator.add_violations(index, find_violations(constraint, implementors))
    return len(implementors)


def _cut_at_first_malformed(
    extractions: list[Extraction],
) -> tuple[list[Extraction], MalformedConstraint | None]:
    """Split off everything from the first malformed marker onwards."""
    for index, extraction in enumerate(extractions):
        if isinstance(extraction, MalformedConstraint):
            return extractions[:index], extraction
    return extractions, None


def _configuration_failure(op: str, exc: ConfigurationError) -> ServiceResult:
    log.error(str(exc))
    return ServiceResult.failure(
        op,
        exc.code,
        str(exc),
        detail={"path": str(exc.path)} if exc.path else None,
    )
