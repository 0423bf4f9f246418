"""Deterministic fixture data for mock mode.

Values are realistic and stable across runs. Snapshot start times are
derived from a fixed age so ``age_in_days`` is the same whatever the clock.
"""

from datetime import datetime, timedelta, timezone

from finopsguard.schemas.resource import (
    BlockSnapshot,
    BlockVolume,
    ComputeInstance,
    CpuUtilization,
    InstanceState,
)

MOCK_ACCOUNT_ID = "123456789012"
MOCK_REGION = "us-east-1"


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def mock_instances(region: str = MOCK_REGION) -> list[ComputeInstance]:
    return [
        ComputeInstance(
            id="i-0123456789abcdef0",
            instance_id="i-0123456789abcdef0",
            instance_type="t3.large",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            state=InstanceState.RUNNING,
            launch_time=_utc("2024-01-15T10:30:00"),
            cpu_utilization=CpuUtilization(average=12.5),
            tags={"Name": "web-server-01", "Environment": "production", "Team": "platform"},
        ),
        ComputeInstance(
            id="i-0123456789abcdef1",
            instance_id="i-0123456789abcdef1",
            instance_type="m5.xlarge",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            state=InstanceState.RUNNING,
            launch_time=_utc("2024-02-20T14:15:00"),
            cpu_utilization=CpuUtilization(average=45.8),
            tags={"Name": "app-server-01", "Environment": "production", "Team": "backend"},
        ),
        ComputeInstance(
            id="i-0123456789abcdef2",
            instance_id="i-0123456789abcdef2",
            instance_type="t3.medium",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            state=InstanceState.STOPPED,
            launch_time=_utc("2024-03-10T09:00:00"),
            tags={"Name": "dev-server-01", "Environment": "development", "Team": "engineering"},
        ),
        ComputeInstance(
            id="i-0123456789abcdef3",
            instance_id="i-0123456789abcdef3",
            instance_type="c5.2xlarge",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            state=InstanceState.RUNNING,
            launch_time=_utc("2024-01-05T11:20:00"),
            cpu_utilization=CpuUtilization(average=78.3),
            tags={"Name": "compute-worker-01", "Environment": "production", "Team": "data"},
        ),
    ]


def mock_volumes(region: str = MOCK_REGION) -> list[BlockVolume]:
    return [
        BlockVolume(
            id="vol-0123456789abcdef0",
            volume_id="vol-0123456789abcdef0",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            size_gb=100,
            volume_type="gp3",
            state="in-use",
            attached=True,
            attached_instance_id="i-0123456789abcdef0",
            create_time=_utc("2024-01-15T10:30:00"),
            encrypted=True,
            tags={"Name": "web-server-root", "Environment": "production"},
        ),
        BlockVolume(
            id="vol-0123456789abcdef1",
            volume_id="vol-0123456789abcdef1",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            size_gb=500,
            volume_type="gp3",
            state="in-use",
            attached=True,
            attached_instance_id="i-0123456789abcdef1",
            create_time=_utc("2024-02-20T14:15:00"),
            encrypted=True,
            tags={"Name": "app-server-data", "Environment": "production"},
        ),
        BlockVolume(
            id="vol-0123456789abcdef2",
            volume_id="vol-0123456789abcdef2",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            size_gb=200,
            volume_type="gp2",
            state="available",
            attached=False,
            create_time=_utc("2024-03-01T08:00:00"),
            encrypted=False,
            tags={"Name": "orphaned-volume", "Environment": "production"},
        ),
        BlockVolume(
            id="vol-0123456789abcdef3",
            volume_id="vol-0123456789abcdef3",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            size_gb=50,
            volume_type="gp3",
            state="in-use",
            attached=True,
            attached_instance_id="i-0123456789abcdef3",
            create_time=_utc("2024-01-05T11:20:00"),
            encrypted=True,
            tags={"Name": "compute-worker-root", "Environment": "production"},
        ),
        BlockVolume(
            id="vol-0123456789abcdef4",
            volume_id="vol-0123456789abcdef4",
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            size_gb=1000,
            volume_type="io1",
            state="available",
            attached=False,
            create_time=_utc("2024-02-10T12:00:00"),
            encrypted=True,
            tags={"Name": "old-database-volume", "Environment": "production"},
        ),
    ]


# (snapshot id, source volume, size GB, age in days, description, tags)
_SNAPSHOTS = [
    (
        "snap-0123456789abcdef0",
        "vol-0123456789abcdef0",
        100,
        45,
        "Daily backup snapshot",
        {"Name": "web-server-backup-daily", "BackupType": "daily"},
    ),
    (
        "snap-0123456789abcdef1",
        "vol-0123456789abcdef1",
        500,
        20,
        "Daily backup snapshot",
        {"Name": "app-server-backup-daily", "BackupType": "daily"},
    ),
    (
        "snap-0123456789abcdef2",
        "vol-0123456789abcdef0",
        100,
        90,
        "Monthly backup snapshot",
        {"Name": "web-server-backup-monthly", "BackupType": "monthly"},
    ),
    (
        "snap-0123456789abcdef3",
        "vol-0123456789abcdef4",
        1000,
        135,
        "Old database snapshot",
        {"Name": "database-backup-monthly", "BackupType": "monthly"},
    ),
]


def mock_snapshots(now: datetime, region: str = MOCK_REGION) -> list[BlockSnapshot]:
    return [
        BlockSnapshot(
            id=snapshot_id,
            snapshot_id=snapshot_id,
            region=region,
            account_id=MOCK_ACCOUNT_ID,
            source_volume_id=volume_id,
            volume_size_gb=size,
            state="completed",
            start_time=now - timedelta(days=age),
            age_in_days=age,
            encrypted=True,
            description=description,
            tags=dict(tags),
        )
        for snapshot_id, volume_id, size, age, description, tags in _SNAPSHOTS
    ]


# Monthly (30-day) spend per service; rescaled to the requested window
MOCK_MONTHLY_SERVICE_COSTS: dict[str, float] = {
    "Amazon Elastic Compute Cloud - Compute": 1245.30,
    "Amazon Elastic Block Store": 856.20,
    "Amazon Simple Storage Service": 342.50,
    "Amazon Relational Database Service": 285.40,
    "Amazon CloudWatch": 118.10,
}
