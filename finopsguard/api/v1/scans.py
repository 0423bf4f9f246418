"""Scan API endpoints."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from finopsguard.api.deps import get_owner_key, get_scan_service, get_scan_storage
from finopsguard.schemas.scan import ScanRequest, ScanResult, ScanRunResponse, ScanSummary
from finopsguard.services.scan_service import ScanService
from finopsguard.services.scan_storage import ScanStorage

logger = structlog.get_logger()

router = APIRouter()


@router.post("/run", response_model=ScanRunResponse, status_code=status.HTTP_201_CREATED)
async def run_scan(
    scan_in: ScanRequest,
    scan_service: Annotated[ScanService, Depends(get_scan_service)],
    storage: Annotated[ScanStorage, Depends(get_scan_storage)],
    owner_key: Annotated[str | None, Depends(get_owner_key)],
) -> ScanRunResponse:
    """
    Run a scan synchronously and store its result.

    Failures propagate as typed errors and are rendered by the
    application's error handler with the matching status code.
    """
    result = await scan_service.run_scan(scan_in)
    await storage.store(result, owner_key)

    return ScanRunResponse(
        scan_id=result.scan_id,
        timestamp=result.timestamp,
        summary=scan_service.to_summary(result),
    )


@router.get("", response_model=list[ScanResult])
async def list_scans(
    storage: Annotated[ScanStorage, Depends(get_scan_storage)],
    owner_key: Annotated[str | None, Depends(get_owner_key)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
) -> list[ScanResult]:
    """List stored scans, newest first."""
    results = await storage.list(owner_key)
    return results[skip : skip + limit]


async def _get_or_404(storage: ScanStorage, scan_id: str) -> ScanResult:
    result = await storage.get(scan_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scan {scan_id} not found",
        )
    return result


@router.get("/{scan_id}", response_model=ScanResult)
async def get_scan(
    scan_id: str,
    storage: Annotated[ScanStorage, Depends(get_scan_storage)],
) -> ScanResult:
    """Get the full result of one scan."""
    return await _get_or_404(storage, scan_id)


@router.get("/{scan_id}/summary", response_model=ScanSummary)
async def get_scan_summary(
    scan_id: str,
    scan_service: Annotated[ScanService, Depends(get_scan_service)],
    storage: Annotated[ScanStorage, Depends(get_scan_storage)],
) -> ScanSummary:
    """Get the condensed summary of one scan."""
    result = await _get_or_404(storage, scan_id)
    return scan_service.to_summary(result)
