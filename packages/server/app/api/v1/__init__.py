"""
API v1 Router
"""

from fastapi import APIRouter
from . import requests

router = APIRouter()

router.include_router(requests.router, prefix="/requests", tags=["Requests"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/requests",
            "/requests/active",
        ],
    }
