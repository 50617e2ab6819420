"""
Liveness endpoint for API v1.  Public; used by container health checks.
"""

from typing import Any, Dict

from fastapi import APIRouter

from workspace_booking_api.app.core.config import settings

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"success": True, "status": "ok", "version": settings.api_version}
