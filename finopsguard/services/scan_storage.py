"""Scan result storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import pydantic
import structlog

from finopsguard.core.exceptions import InvalidScanResultError, StorageError
from finopsguard.schemas.scan import ScanResult

logger = structlog.get_logger()


def validate_scan_result(result: object) -> ScanResult:
    """
    Check that a result is complete enough to be stored.

    Raises:
        InvalidScanResultError: If the result is missing or not a ScanResult
    """
    if result is None:
        raise InvalidScanResultError("Scan result is missing")
    if not isinstance(result, ScanResult):
        raise InvalidScanResultError(
            f"Expected a ScanResult, got {type(result).__name__}"
        )
    return result


class ScanStorage(ABC):
    """Key-value store of scan results keyed by scan id."""

    @abstractmethod
    async def store(self, result: ScanResult, owner_key: str | None = None) -> None:
        """
        Persist a scan result, replacing any previous result with the same id.

        Raises:
            InvalidScanResultError: If the result is incomplete
            StorageError: If the result could not be persisted
        """

    @abstractmethod
    async def get(self, scan_id: str) -> ScanResult | None:
        """Return the stored result, or None if the id is unknown."""

    @abstractmethod
    async def list(self, owner_key: str | None = None) -> list[ScanResult]:
        """Stored results, newest first, optionally restricted to one owner."""

    @abstractmethod
    async def get_owner(self, scan_id: str) -> str | None:
        """Owner key recorded with the scan, if any."""

    async def get_latest(self, owner_key: str | None = None) -> ScanResult | None:
        results = await self.list(owner_key)
        return results[0] if results else None


@dataclass(frozen=True)
class _StoredScan:
    owner_key: str | None
    payload: str


class InMemoryScanStorage(ScanStorage):
    """
    Process-local storage.

    Results are kept as camelCase JSON documents so every stored record is
    self-describing and detached from the caller's objects.
    """

    def __init__(self) -> None:
        self._scans: dict[str, _StoredScan] = {}

    async def store(self, result: ScanResult, owner_key: str | None = None) -> None:
        result = validate_scan_result(result)
        try:
            payload = result.model_dump_json(by_alias=True)
        except pydantic.PydanticSerializationError as e:
            raise StorageError(
                f"Failed to store scan {result.scan_id}: {e}", original_error=e
            ) from e

        self._scans[result.scan_id] = _StoredScan(owner_key=owner_key, payload=payload)
        logger.info("storage.scan_stored", scan_id=result.scan_id, owner_key=owner_key)

    async def get(self, scan_id: str) -> ScanResult | None:
        stored = self._scans.get(scan_id) if scan_id else None
        if stored is None:
            return None
        return self._load(scan_id, stored)

    async def list(self, owner_key: str | None = None) -> list[ScanResult]:
        results = [
            self._load(scan_id, stored)
            for scan_id, stored in self._scans.items()
            if owner_key is None or stored.owner_key == owner_key
        ]
        results.sort(key=lambda r: r.timestamp, reverse=True)
        return results

    async def get_owner(self, scan_id: str) -> str | None:
        stored = self._scans.get(scan_id)
        return stored.owner_key if stored else None

    async def clear(self) -> None:
        self._scans.clear()

    def _load(self, scan_id: str, stored: _StoredScan) -> ScanResult:
        try:
            return ScanResult.model_validate_json(stored.payload)
        except pydantic.ValidationError as e:
            raise StorageError(f"Stored scan {scan_id} is corrupt: {e}", original_error=e) from e
