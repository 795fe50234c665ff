"""
Health check endpoint
"""
from fastapi import APIRouter

from evalmate.utils import now_ms


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": now_ms()}
