"""Health check and provider status endpoints.

Provides liveness (/health) and the per-capability provider report
(/api/v1/integrations/status) so operators can see which capabilities run
against live vendors and which fell back to stubs.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from src.integrations.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No vendor is contacted."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/api/v1/integrations/status")
async def integrations_status(request: Request):
    """Report ``real`` or ``stub`` for each capability."""
    providers = getattr(request.app.state, "providers", None)
    if providers is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Providers not initialized",
        )
    return {"providers": providers.status()}
