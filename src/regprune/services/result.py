"""ServiceResult and ServiceError — what every service operation returns.

The CLI consumes this type for both human and ``--json`` output.  A failed
result may still carry ``data``: a cleanup that aborts mid-way reports the
evaluation and the deletions completed before the failure.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Error codes
REGISTRY_ERROR = "REGISTRY_ERROR"
TAG_NOT_FOUND = "TAG_NOT_FOUND"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"clean"``, ``"scan"``, ``"config"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        data: dict[str, Any] | None = None,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            data=data or {},
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )
