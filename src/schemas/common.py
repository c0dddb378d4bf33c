"""Health and error envelopes shared by every route."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness probe body."""

    status: HealthStatus = Field(description="Current health status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(default="0.1.0", description="API version")


class CheckResult(BaseModel):
    """Outcome of probing one dependency."""

    name: str = Field(description="Dependency name, e.g. database")
    healthy: bool = Field(description="Whether the dependency answered")
    latency_ms: float | None = Field(default=None, description="Probe round trip in milliseconds")
    error: str | None = Field(default=None, description="Failure reason when unhealthy")


class ReadinessResponse(HealthResponse):
    """Readiness probe body: overall status plus one entry per dependency."""

    checks: list[CheckResult] = Field(default_factory=list, description="Per-dependency results")


class ErrorDetail(BaseModel):
    """One field-level problem, shaped like FastAPI's own validation errors."""

    loc: list[str] | None = Field(default=None, description="Path to the offending field")
    msg: str = Field(description="What is wrong")
    type: str = Field(description="Machine-readable error kind")

    @classmethod
    def from_dict(cls, detail: dict[str, Any]) -> "ErrorDetail":
        loc = detail.get("loc")
        return cls(
            loc=[str(part) for part in loc] if loc else None,
            msg=detail.get("msg", str(detail)),
            type=detail.get("type", "error"),
        )


class ErrorResponse(BaseModel):
    """Body of every error the API returns."""

    error: str = Field(description="Error category, e.g. not_found or conflict")
    message: str = Field(description="Human-readable description")
    details: list[ErrorDetail] | None = Field(default=None, description="Field-level details")
    request_id: str | None = Field(default=None, description="Echo of the X-Request-ID header")
    timestamp: datetime = Field(default_factory=_utcnow, description="When the error was produced")

    @classmethod
    def from_exception(
        cls,
        error_type: str,
        message: str,
        details: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build the envelope from the parts an ``APIError`` carries."""
        return cls(
            error=error_type,
            message=message,
            details=[ErrorDetail.from_dict(d) for d in details] if details else None,
            request_id=request_id,
        )
