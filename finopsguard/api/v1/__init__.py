"""API v1 router configuration."""

from fastapi import APIRouter

from finopsguard.api.v1 import scans

api_router = APIRouter()

api_router.include_router(scans.router, prefix="/scans", tags=["scans"])
