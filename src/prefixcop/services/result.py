"""ServiceResult and ServiceError — what a check hands back to the build.

INVARIANT: All service-layer operations return ServiceResult.
``ok`` is the build outcome: a failed result makes the CLI exit non-zero
so the invoking pipeline stops. ``data`` carries the report in both
cases, so reporting-only runs and failing runs expose the same issues.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why a run failed.

    Codes: ``OUTPUT_DIR_MISSING``, ``PREFIX_VIOLATIONS``,
    ``MALFORMED_CONSTRAINT``. For the latter two ``message`` is the
    report text exactly as it was logged.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one operation (``check`` or ``interfaces``).

    Attributes:
        ok: Whether the build may continue.
        op: Name of the operation.
        data: Scan counts and issues; present on failure too.
        warnings: Files that could not be scanned.
        error: Set when ``ok`` is False.
        meta: Span tree under ``--verbose``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Build a failed result carrying a :class:`ServiceError`."""
        return cls(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )

    @property
    def exit_code(self) -> int:
        """Process exit status for the build: 0 passes, 1 stops it."""
        return 0 if self.ok else 1
