"""EBS volume and snapshot inventory."""

from datetime import datetime
from typing import Any, Callable

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from finopsguard.core.config import Settings
from finopsguard.providers.aws.client import (
    DEFAULT_SESSION_FACTORY,
    SessionFactory,
    build_client_config,
    classify_listing_error,
    create_session,
    tags_to_dict,
    utc_now,
)
from finopsguard.providers.base import SnapshotCollector, VolumeCollector
from finopsguard.schemas.credentials import AssumedCredentials
from finopsguard.schemas.resource import BlockSnapshot, BlockVolume, days_since

logger = structlog.get_logger()


def parse_volume(volume: dict[str, Any], region: str) -> BlockVolume:
    attachments = volume.get("Attachments") or []
    return BlockVolume(
        id=volume["VolumeId"],
        volume_id=volume["VolumeId"],
        region=region,
        # DescribeVolumes does not report the owning account
        account_id="unknown",
        size_gb=volume.get("Size") or 0,
        volume_type=volume.get("VolumeType") or "unknown",
        state=volume.get("State") or "unknown",
        attached=len(attachments) > 0,
        attached_instance_id=attachments[0].get("InstanceId") if attachments else None,
        create_time=volume.get("CreateTime") or utc_now(),
        encrypted=bool(volume.get("Encrypted")),
        tags=tags_to_dict(volume.get("Tags")),
    )


def parse_snapshot(snapshot: dict[str, Any], region: str, now: datetime) -> BlockSnapshot:
    start_time = snapshot.get("StartTime") or now
    return BlockSnapshot(
        id=snapshot["SnapshotId"],
        snapshot_id=snapshot["SnapshotId"],
        region=region,
        account_id=snapshot.get("OwnerId") or "unknown",
        source_volume_id=snapshot.get("VolumeId"),
        volume_size_gb=snapshot.get("VolumeSize") or 0,
        state=snapshot.get("State") or "unknown",
        start_time=start_time,
        age_in_days=days_since(start_time, now),
        encrypted=bool(snapshot.get("Encrypted")),
        description=snapshot.get("Description"),
        tags=tags_to_dict(snapshot.get("Tags")),
    )


class AWSVolumeCollector(VolumeCollector):
    """Lists EBS volumes through the DescribeVolumes paginator."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
    ) -> None:
        self.config = build_client_config(settings)
        self.session_factory = session_factory

    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockVolume]:
        session = create_session(self.session_factory, credentials)
        volumes: list[BlockVolume] = []

        try:
            async with session.client("ec2", region_name=region, config=self.config) as ec2:
                paginator = ec2.get_paginator("describe_volumes")
                async for page in paginator.paginate():
                    for volume in page.get("Volumes", []):
                        if volume.get("VolumeId"):
                            volumes.append(parse_volume(volume, region))
        except (ClientError, BotoCoreError) as e:
            raise classify_listing_error(e, "EBS volumes") from e

        logger.info("collector.ebs.volumes_collected", region=region, count=len(volumes))
        return volumes


class AWSSnapshotCollector(SnapshotCollector):
    """Lists EBS snapshots owned by the scanned account."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = build_client_config(settings)
        self.session_factory = session_factory
        self.clock = clock

    async def collect(self, credentials: AssumedCredentials, region: str) -> list[BlockSnapshot]:
        session = create_session(self.session_factory, credentials)
        now = self.clock()
        snapshots: list[BlockSnapshot] = []

        try:
            async with session.client("ec2", region_name=region, config=self.config) as ec2:
                paginator = ec2.get_paginator("describe_snapshots")
                async for page in paginator.paginate(OwnerIds=["self"]):
                    for snapshot in page.get("Snapshots", []):
                        if snapshot.get("SnapshotId"):
                            snapshots.append(parse_snapshot(snapshot, region, now))
        except (ClientError, BotoCoreError) as e:
            raise classify_listing_error(e, "EBS snapshots") from e

        logger.info("collector.ebs.snapshots_collected", region=region, count=len(snapshots))
        return snapshots
