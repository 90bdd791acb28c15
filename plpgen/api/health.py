# plpgen/api/health.py
"""
Health check endpoints.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from plpgen.db import get_connection_error, get_store

router = APIRouter(tags=["Health"])


@router.get("/healthz")
async def healthz():
    """Simple health check."""
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/api/health")
async def api_health():
    """API health check, including which store is active."""
    return {
        "status": "healthy",
        "store": get_store().name,
        "storeError": get_connection_error(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
