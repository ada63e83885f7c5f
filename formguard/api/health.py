"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from formguard.models.responses import HealthResponse, HealthDependency

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """System health check with dependency status."""
    engine = request.app.state.validation_engine
    loader = engine.interpolator.loader
    dependencies = {}

    # Check message bundles
    start = time.time()
    root_entries = len(loader.bundle(loader.default_locale).keys())
    latency = (time.time() - start) * 1000
    if root_entries:
        dependencies["message_bundles"] = HealthDependency(
            status="healthy",
            latency_ms=round(latency, 2),
            message=f"{root_entries} messages for '{loader.default_locale}'",
        )
    else:
        dependencies["message_bundles"] = HealthDependency(
            status="unhealthy",
            message=f"No messages found in {', '.join(str(d) for d in loader.dirs)}",
        )

    # Overall status
    all_healthy = all(d.status == "healthy" for d in dependencies.values())
    status = "healthy" if all_healthy else "degraded"

    return HealthResponse(
        status=status,
        uptime_seconds=round(time.time() - _start_time, 2),
        constraint_kinds=len(engine.registry),
        locales=loader.available_locales(),
        dependencies=dependencies,
    )
