"""Tests for output mode dispatch."""

from __future__ import annotations

import json

from prefixcop.output.formatters import OutputSettings, format_result
from prefixcop.services.result import ServiceResult

RESULT = ServiceResult(ok=True, op="check", data={"issues": [], "count": 0})


class TestFormatResult:
    def test_default_is_rich(self) -> None:
        out = format_result(RESULT)
        assert out.startswith("OK")
        assert "No prefix violations found." in out

    def test_json(self) -> None:
        data = json.loads(format_result(RESULT, settings=OutputSettings(json_output=True)))
        assert data["ok"] is True
        assert data["data"]["count"] == 0

    def test_quiet(self) -> None:
        assert format_result(RESULT, settings=OutputSettings(quiet=True)) == "OK: check"

    def test_json_wins_over_quiet(self) -> None:
        out = format_result(RESULT, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(out)["op"] == "check"
