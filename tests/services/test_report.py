"""Tests for Report and the thread-safe ViolationAggregator."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from prefixcop.domain.model import MalformedConstraint, TypeDescriptor, Violation
from prefixcop.domain.types import IssueKind
from prefixcop.services.report import Report, ReportEntry, ViolationAggregator


def _iface(name: str) -> TypeDescriptor:
    return TypeDescriptor(fqn=f"api.{name}", simple_name=name, module="api", is_interface=True)


def _violation(impl: str, iface: str = "Loggable", prefix: str = "Log") -> Violation:
    implementor = TypeDescriptor(fqn=f"impl.{impl}", simple_name=impl, module="impl")
    return Violation(implementor=implementor, interface=_iface(iface), prefix=prefix)


class TestReportEntry:
    def test_from_violation(self) -> None:
        entry = ReportEntry.from_violation(_violation("Metric"))
        assert entry.kind is IssueKind.VIOLATION
        assert entry.type == "impl.Metric"
        assert entry.interface == "api.Loggable"
        assert entry.prefix == "Log"

    def test_from_malformed(self) -> None:
        entry = ReportEntry.from_malformed(MalformedConstraint(interface=_iface("Loggable")))
        assert entry.kind is IssueKind.MALFORMED
        assert entry.type is None
        assert entry.prefix is None
        assert "requires a prefix" in entry.message

    def test_to_dict(self) -> None:
        d = ReportEntry.from_violation(_violation("Metric")).to_dict()
        assert d["kind"] == "violation"
        assert set(d) == {"kind", "message", "interface", "type", "prefix"}


class TestReport:
    def test_empty(self) -> None:
        report = Report()
        assert report.is_empty
        assert report.count == 0
        assert report.render() == "0 prefix violations found:"

    def test_render(self) -> None:
        report = Report(entries=(ReportEntry.from_violation(_violation("Metric")),))
        lines = report.render().splitlines()
        assert lines[0] == "1 prefix violations found:"
        assert lines[1].startswith("Type 'impl.Metric' implements 'api.Loggable'")

    def test_kind_partitions(self) -> None:
        report = Report(
            entries=(
                ReportEntry.from_malformed(MalformedConstraint(interface=_iface("Bare"))),
                ReportEntry.from_violation(_violation("Metric")),
            )
        )
        assert len(report.violations) == 1
        assert len(report.malformed) == 1

    def test_summary_counts_malformed_apart(self) -> None:
        report = Report(
            entries=(
                ReportEntry.from_malformed(MalformedConstraint(interface=_iface("Bare"))),
                ReportEntry.from_violation(_violation("Metric")),
                ReportEntry.from_violation(_violation("Counter")),
            )
        )
        assert report.summary() == "2 prefix violations found (1 malformed marker):"

    def test_summary_only_malformed(self) -> None:
        report = Report(
            entries=tuple(
                ReportEntry.from_malformed(MalformedConstraint(interface=_iface(name)))
                for name in ("One", "Two")
            )
        )
        assert report.render().splitlines()[0] == "0 prefix violations found (2 malformed markers):"


class TestViolationAggregator:
    def test_orders_by_interface_index(self) -> None:
        aggregator = ViolationAggregator()
        aggregator.add_violations(2, [_violation("C", "Third")])
        aggregator.add_malformed(1, MalformedConstraint(interface=_iface("Second")))
        aggregator.add_violations(0, [_violation("A"), _violation("B")])
        report = aggregator.report()
        assert [e.interface for e in report.entries] == [
            "api.Loggable",
            "api.Loggable",
            "api.Second",
            "api.Third",
        ]
        assert [e.type for e in report.entries][:2] == ["impl.A", "impl.B"]

    def test_no_deduplication(self) -> None:
        aggregator = ViolationAggregator()
        aggregator.add_violations(0, [_violation("X", "One")])
        aggregator.add_violations(1, [_violation("X", "Two")])
        assert aggregator.report().count == 2

    def test_empty_violation_list(self) -> None:
        aggregator = ViolationAggregator()
        aggregator.add_violations(0, [])
        assert aggregator.report().is_empty

    def test_concurrent_adds_keep_order(self) -> None:
        aggregator = ViolationAggregator()

        def add(index: int) -> None:
            aggregator.add_violations(index, [_violation(f"T{index}")])

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(add, reversed(range(50))))

        types = [e.type for e in aggregator.report().entries]
        assert types == [f"impl.T{i}" for i in range(50)]
