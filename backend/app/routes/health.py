"""
Careers Site Backend: Health Check Route
==========================================

What:  Liveness endpoint for the container platform and uptime monitors.
How:   Answers 200 with the server time. SMTP is not probed here; the
       transport is verified on every submission.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.schemas.application import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))
