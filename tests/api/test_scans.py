"""Tests for the scan API endpoints."""

import dataclasses

import pytest
from httpx import ASGITransport, AsyncClient

from finopsguard.core.exceptions import ValidationError
from finopsguard.main import create_app
from finopsguard.providers.factory import build_provider_set
from finopsguard.schemas.permissions import PermissionReport, PermissionServiceError
from finopsguard.services.scan_storage import InMemoryScanStorage
from tests.fakes import VALID_ROLE_ARN

RUN_BODY = {"region": "us-east-1", "roleArn": VALID_ROLE_ARN}


class DenyingProber:
    async def validate(self, credentials, region):
        report = PermissionReport(
            success=False,
            errors=[
                PermissionServiceError(
                    service="Cost Explorer", error="Missing Cost Explorer permissions", code="AccessDeniedException"
                )
            ],
        )
        raise ValidationError("Permission validation failed: Cost Explorer", report)


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["mockAws"] is True


@pytest.mark.asyncio
async def test_run_scan(async_client: AsyncClient):
    response = await async_client.post("/api/v1/scans/run", json=RUN_BODY)

    assert response.status_code == 201
    data = response.json()
    assert data["scanId"].startswith("scan-")
    summary = data["summary"]
    assert summary["scanId"] == data["scanId"]
    assert summary["totalCost"] == 2847.5
    assert summary["potentialSavings"] == 205.0
    assert summary["issueCount"] == 5
    assert summary["issues"][0]["ruleId"] == "unattached_ebs"
    assert summary["issues"][0]["riskLevel"] == "high"


@pytest.mark.asyncio
async def test_run_scan_snake_case_body(async_client: AsyncClient):
    response = await async_client.post(
        "/api/v1/scans/run",
        json={"region": "us-east-1", "role_arn": VALID_ROLE_ARN, "include_metrics": False},
    )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_get_scan_and_summary(async_client: AsyncClient):
    run = await async_client.post("/api/v1/scans/run", json=RUN_BODY)
    scan_id = run.json()["scanId"]

    response = await async_client.get(f"/api/v1/scans/{scan_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["scanId"] == scan_id
    assert data["resourceInventory"] == {"instanceCount": 4, "volumeCount": 5, "snapshotCount": 4}
    assert data["savings"]["totalAnnualSavings"] == 2460.0
    assert len(data["savings"]["resourceBreakdown"]) == 5
    assert data["costSummary"]["currency"] == "USD"

    response = await async_client.get(f"/api/v1/scans/{scan_id}/summary")
    assert response.status_code == 200
    assert response.json()["issueCount"] == 5


@pytest.mark.asyncio
async def test_list_scans_by_owner(async_client: AsyncClient):
    first = await async_client.post("/api/v1/scans/run", json=RUN_BODY, headers={"X-Owner-Key": "team-a"})
    await async_client.post("/api/v1/scans/run", json=RUN_BODY, headers={"X-Owner-Key": "team-b"})

    response = await async_client.get("/api/v1/scans")
    assert response.status_code == 200
    assert len(response.json()) == 2

    response = await async_client.get("/api/v1/scans", headers={"X-Owner-Key": "team-a"})
    assert [s["scanId"] for s in response.json()] == [first.json()["scanId"]]

    response = await async_client.get("/api/v1/scans", params={"limit": 1})
    assert len(response.json()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/v1/scans/scan-missing", "/api/v1/scans/scan-missing/summary"])
async def test_scan_not_found(async_client: AsyncClient, path):
    response = await async_client.get(path)

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_invalid_role_arn(async_client: AsyncClient):
    response = await async_client.post("/api/v1/scans/run", json={"region": "us-east-1", "roleArn": "not-an-arn"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidRoleArn"


@pytest.mark.asyncio
async def test_missing_region(async_client: AsyncClient):
    response = await async_client.post("/api/v1/scans/run", json={"roleArn": VALID_ROLE_ARN})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidRequest"


@pytest.mark.asyncio
async def test_permission_failure(mock_settings):
    providers = dataclasses.replace(build_provider_set(mock_settings), prober=DenyingProber())
    storage = InMemoryScanStorage()
    app = create_app(settings=mock_settings, provider_set=providers, storage=storage)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/v1/scans/run", json=RUN_BODY)

    assert response.status_code == 403
    data = response.json()
    assert data["error"] == "PermissionValidationFailed"
    assert data["stage"] == "validating_permissions"
    assert data["details"][0]["service"] == "Cost Explorer"
    assert await storage.list() == []
