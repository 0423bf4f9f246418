"""Tests for the permission prober."""

from unittest.mock import AsyncMock

import pytest

from finopsguard.core.exceptions import ValidationError
from finopsguard.providers.aws.permissions import AWSPermissionProber
from tests.fakes import FakeClient, FakeSessionFactory, make_client_error


def make_prober(test_settings, ce_call: AsyncMock, ec2_call: AsyncMock) -> AWSPermissionProber:
    factory = FakeSessionFactory(
        ce=FakeClient(get_cost_and_usage=ce_call),
        ec2=FakeClient(describe_instances=ec2_call),
    )
    return AWSPermissionProber(test_settings, session_factory=factory)


class TestPermissionProber:
    """Test capability probes and the aggregated report."""

    @pytest.mark.asyncio
    async def test_all_checks_pass(self, test_settings, credentials):
        ce_call = AsyncMock(return_value={"ResultsByTime": []})
        ec2_call = AsyncMock(return_value={"Reservations": []})
        prober = make_prober(test_settings, ce_call, ec2_call)

        report = await prober.validate(credentials, "eu-west-1")

        assert report.success is True
        assert report.errors == []
        assert report.checks.cost_explorer.success
        assert report.checks.ec2.success
        ec2_call.assert_awaited_once_with(MaxResults=5)
        ce_kwargs = ce_call.await_args.kwargs
        assert ce_kwargs["Granularity"] == "DAILY"
        assert ce_kwargs["Metrics"] == ["BlendedCost"]

    @pytest.mark.asyncio
    async def test_billing_denied_lists_only_cost_explorer(self, test_settings, credentials):
        """Test that a billing AccessDenied with EC2 success names exactly Cost Explorer."""
        prober = make_prober(
            test_settings,
            AsyncMock(side_effect=make_client_error("AccessDeniedException", "GetCostAndUsage")),
            AsyncMock(return_value={"Reservations": []}),
        )

        with pytest.raises(ValidationError) as exc_info:
            await prober.validate(credentials, "us-east-1")

        error = exc_info.value
        assert error.code == "PermissionValidationFailed"
        assert error.status_code == 403
        assert error.message == "Permission validation failed: Cost Explorer"
        assert [e.service for e in error.report.errors] == ["Cost Explorer"]
        assert "ce:GetCostAndUsage" in error.report.errors[0].error
        assert error.report.checks.ec2.success is True

    @pytest.mark.asyncio
    async def test_both_failures_reported(self, test_settings, credentials):
        prober = make_prober(
            test_settings,
            AsyncMock(side_effect=make_client_error("UnrecognizedClientException")),
            AsyncMock(side_effect=make_client_error("UnauthorizedOperation", "DescribeInstances")),
        )

        with pytest.raises(ValidationError) as exc_info:
            await prober.validate(credentials, "us-east-1")

        report = exc_info.value.report
        assert exc_info.value.message == "Permission validation failed: Cost Explorer, EC2"
        assert report.errors[0].error == "Invalid AWS credentials. Check your access key and secret."
        assert report.errors[1].code == "UnauthorizedOperation"
        assert "ec2:DescribeInstances" in report.errors[1].error

    @pytest.mark.asyncio
    async def test_unmapped_error_keeps_provider_message(self, test_settings, credentials):
        prober = make_prober(
            test_settings,
            AsyncMock(return_value={}),
            AsyncMock(side_effect=make_client_error("OptInRequired", message="Region not enabled")),
        )

        with pytest.raises(ValidationError) as exc_info:
            await prober.validate(credentials, "ap-east-1")

        assert exc_info.value.report.errors[0].error == "Region not enabled"
        assert exc_info.value.report.errors[0].code == "OptInRequired"
