"""Tests for the EBS volume and snapshot collectors."""

from datetime import timedelta

import pytest
from botocore.exceptions import EndpointConnectionError, ReadTimeoutError

from finopsguard.core.exceptions import CollectorError
from finopsguard.providers.aws.ebs import AWSSnapshotCollector, AWSVolumeCollector
from tests.fakes import FIXED_NOW, FakeClient, FakePaginator, FakeSessionFactory, make_client_error


def volume(volume_id, state="available", attachments=None, **extra):
    data = {
        "VolumeId": volume_id,
        "Size": 200,
        "VolumeType": "gp2",
        "State": state,
        "Attachments": attachments or [],
        "CreateTime": FIXED_NOW - timedelta(days=90),
        "Encrypted": False,
    }
    data.update(extra)
    return data


def snapshot(snapshot_id, age_days, size=100, state="completed"):
    return {
        "SnapshotId": snapshot_id,
        "VolumeId": "vol-1",
        "VolumeSize": size,
        "State": state,
        "StartTime": FIXED_NOW - timedelta(days=age_days, hours=5),
        "OwnerId": "123456789012",
        "Encrypted": True,
        "Description": "backup",
    }


class TestVolumeCollector:
    """Test volume listing and normalization."""

    @pytest.mark.asyncio
    async def test_attachment_state(self, test_settings, credentials):
        pages = [
            {"Volumes": [volume("vol-1")]},
            {
                "Volumes": [
                    volume("vol-2", state="in-use", attachments=[{"InstanceId": "i-1"}, {"InstanceId": "i-2"}]),
                    {"Size": 1},
                ]
            },
        ]
        factory = FakeSessionFactory(
            ec2=FakeClient(paginators={"describe_volumes": FakePaginator(pages=pages)})
        )
        collector = AWSVolumeCollector(test_settings, session_factory=factory)

        volumes = await collector.collect(credentials, "us-west-2")

        assert [v.volume_id for v in volumes] == ["vol-1", "vol-2"]
        assert volumes[0].attached is False
        assert volumes[0].attached_instance_id is None
        assert volumes[0].size_gb == 200
        assert volumes[0].account_id == "unknown"
        assert volumes[1].attached is True
        assert volumes[1].attached_instance_id == "i-1"
        assert volumes[1].region == "us-west-2"

    @pytest.mark.asyncio
    async def test_access_denied(self, test_settings, credentials):
        paginator = FakePaginator(error=make_client_error("UnauthorizedOperation", "DescribeVolumes"))
        factory = FakeSessionFactory(ec2=FakeClient(paginators={"describe_volumes": paginator}))
        collector = AWSVolumeCollector(test_settings, session_factory=factory)

        with pytest.raises(CollectorError) as exc_info:
            await collector.collect(credentials, "us-east-1")

        assert exc_info.value.code == "AccessDenied"
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_connection_error_classified(self, test_settings, credentials):
        paginator = FakePaginator(error=EndpointConnectionError(endpoint_url="https://ec2.us-east-1.amazonaws.com"))
        factory = FakeSessionFactory(ec2=FakeClient(paginators={"describe_volumes": paginator}))
        collector = AWSVolumeCollector(test_settings, session_factory=factory)

        with pytest.raises(CollectorError) as exc_info:
            await collector.collect(credentials, "us-east-1")

        assert exc_info.value.code == "UnknownError"
        assert exc_info.value.service == "EBS volumes"


class TestSnapshotCollector:
    """Test snapshot listing and age derivation."""

    @pytest.mark.asyncio
    async def test_owned_snapshots_with_age(self, test_settings, credentials):
        paginator = FakePaginator(pages=[{"Snapshots": [snapshot("snap-1", 135, size=1000), snapshot("snap-2", 20)]}])
        factory = FakeSessionFactory(ec2=FakeClient(paginators={"describe_snapshots": paginator}))
        collector = AWSSnapshotCollector(test_settings, session_factory=factory, clock=lambda: FIXED_NOW)

        snapshots = await collector.collect(credentials, "us-east-1")

        assert paginator.calls == [{"OwnerIds": ["self"]}]
        assert [s.age_in_days for s in snapshots] == [135, 20]
        assert snapshots[0].volume_size_gb == 1000
        assert snapshots[0].source_volume_id == "vol-1"
        assert snapshots[0].account_id == "123456789012"

    @pytest.mark.asyncio
    async def test_throttled(self, test_settings, credentials):
        paginator = FakePaginator(error=make_client_error("RequestLimitExceeded", "DescribeSnapshots"))
        factory = FakeSessionFactory(ec2=FakeClient(paginators={"describe_snapshots": paginator}))
        collector = AWSSnapshotCollector(test_settings, session_factory=factory)

        with pytest.raises(CollectorError) as exc_info:
            await collector.collect(credentials, "us-east-1")

        assert exc_info.value.code == "Throttled"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_read_timeout_classified(self, test_settings, credentials):
        paginator = FakePaginator(error=ReadTimeoutError(endpoint_url="https://ec2.us-east-1.amazonaws.com"))
        factory = FakeSessionFactory(ec2=FakeClient(paginators={"describe_snapshots": paginator}))
        collector = AWSSnapshotCollector(test_settings, session_factory=factory)

        with pytest.raises(CollectorError) as exc_info:
            await collector.collect(credentials, "us-east-1")

        assert exc_info.value.code == "UnknownError"
        assert exc_info.value.service == "EBS snapshots"
        assert exc_info.value.status_code == 500
