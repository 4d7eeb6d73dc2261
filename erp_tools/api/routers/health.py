"""Health check API router."""

from fastapi import APIRouter, Depends

from erp_tools import __version__
from erp_tools.api.dependencies import get_tools

router = APIRouter()


@router.get("/health", tags=["Health"])
async def health_check(tools=Depends(get_tools)):
    """Combined health check endpoint."""
    return {
        "status": "ok",
        "service": "erp-tools",
        "version": __version__,
        "tools": len(tools),
    }


@router.get("/health/live", tags=["Health"])
async def liveness_probe():
    """Liveness probe - indicates if the process is running."""
    return {"status": "alive"}
