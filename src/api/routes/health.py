"""Liveness and readiness probes."""

import time
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Response, status

from src.core.supabase import check_database_connection
from src.schemas.common import CheckResult, HealthResponse, HealthStatus, ReadinessResponse

router = APIRouter(tags=["health"])

# Dependencies the order ledger cannot serve without.
READINESS_PROBES: dict[str, Callable[[], Awaitable[dict[str, Any]]]] = {
    "database": check_database_connection,
}


async def _run_probe(name: str, probe: Callable[[], Awaitable[dict[str, Any]]]) -> CheckResult:
    start_time = time.perf_counter()
    result = await probe()
    return CheckResult(
        name=name,
        healthy=result["healthy"],
        latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
        error=result.get("error"),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Answers as long as the process is up. Used for liveness probes.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status=HealthStatus.HEALTHY)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "All dependencies healthy"},
        503: {"description": "One or more dependencies unhealthy"},
    },
    summary="Readiness check",
    description="Probes the order store. Used for readiness probes.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Probe each dependency and answer 503 if any of them is down."""
    checks = [await _run_probe(name, probe) for name, probe in READINESS_PROBES.items()]

    ready = all(check.healthy for check in checks)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(status=HealthStatus.HEALTHY if ready else HealthStatus.UNHEALTHY, checks=checks)
