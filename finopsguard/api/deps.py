"""FastAPI dependencies."""

from fastapi import Header, Request

from finopsguard.core.config import Settings
from finopsguard.services.scan_service import ScanService
from finopsguard.services.scan_storage import ScanStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_scan_service(request: Request) -> ScanService:
    return request.app.state.scan_service


def get_scan_storage(request: Request) -> ScanStorage:
    return request.app.state.scan_storage


async def get_owner_key(x_owner_key: str | None = Header(default=None)) -> str | None:
    """Optional caller key recorded with stored scans and used to filter listings."""
    if x_owner_key is None:
        return None
    return x_owner_key.strip() or None
