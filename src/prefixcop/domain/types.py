"""Policy enums shared by configuration and the check service."""

from __future__ import annotations

from enum import StrEnum


class MalformedPolicy(StrEnum):
    """How a marker without a prefix is handled when failing on error."""

    AGGREGATE = "aggregate"
    FAIL_FAST = "fail-fast"


class IssueKind(StrEnum):
    """Kinds of entries that can appear in a check report."""

    VIOLATION = "violation"
    MALFORMED = "malformed"
