"""EC2 instance inventory with optional CloudWatch CPU enrichment."""

from datetime import datetime, timedelta
from typing import Any, Callable

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from finopsguard.core.config import Settings
from finopsguard.core.money import round_money
from finopsguard.providers.aws.client import (
    DEFAULT_SESSION_FACTORY,
    SessionFactory,
    build_client_config,
    classify_listing_error,
    create_session,
    tags_to_dict,
    utc_now,
)
from finopsguard.providers.base import InstanceCollector
from finopsguard.schemas.credentials import AssumedCredentials
from finopsguard.schemas.resource import ComputeInstance, CpuUtilization, InstanceState

logger = structlog.get_logger()

METRIC_PERIOD_SECONDS = 3600


def parse_instance(instance: dict[str, Any], region: str, owner_id: str | None) -> ComputeInstance:
    """Map a DescribeInstances entry to a ComputeInstance."""
    return ComputeInstance(
        id=instance["InstanceId"],
        instance_id=instance["InstanceId"],
        instance_type=instance.get("InstanceType") or "unknown",
        region=region,
        account_id=owner_id or "unknown",
        state=InstanceState.parse(instance.get("State", {}).get("Name")),
        launch_time=instance.get("LaunchTime") or utc_now(),
        tags=tags_to_dict(instance.get("Tags")),
    )


class AWSInstanceCollector(InstanceCollector):
    """Lists EC2 instances through the DescribeInstances paginator."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.config = build_client_config(settings)
        self.session_factory = session_factory
        self.clock = clock

    async def collect(
        self,
        credentials: AssumedCredentials,
        region: str,
        include_metrics: bool = False,
    ) -> list[ComputeInstance]:
        session = create_session(self.session_factory, credentials)
        instances: list[ComputeInstance] = []

        try:
            async with session.client("ec2", region_name=region, config=self.config) as ec2:
                paginator = ec2.get_paginator("describe_instances")
                async for page in paginator.paginate():
                    for reservation in page.get("Reservations", []):
                        owner_id = reservation.get("OwnerId")
                        for instance in reservation.get("Instances", []):
                            if instance.get("InstanceId"):
                                instances.append(parse_instance(instance, region, owner_id))
        except (ClientError, BotoCoreError) as e:
            raise classify_listing_error(e, "EC2 instances") from e

        running = [i for i in instances if i.state == InstanceState.RUNNING]
        if include_metrics and running:
            instances = await self._with_cpu_utilization(session, region, instances)

        logger.info(
            "collector.ec2.collected",
            region=region,
            count=len(instances),
            include_metrics=include_metrics,
        )
        return instances

    async def _with_cpu_utilization(
        self, session: Any, region: str, instances: list[ComputeInstance]
    ) -> list[ComputeInstance]:
        """
        Attach the CPU average to every running instance that has datapoints.

        If CloudWatch cannot be reached at all the instances are returned
        without metrics.
        """
        enriched = []
        try:
            async with session.client("cloudwatch", region_name=region, config=self.config) as cloudwatch:
                for instance in instances:
                    if instance.state != InstanceState.RUNNING:
                        enriched.append(instance)
                        continue

                    average = await self.get_cpu_average(cloudwatch, instance.instance_id)
                    if average is None:
                        enriched.append(instance)
                    else:
                        enriched.append(
                            instance.model_copy(
                                update={"cpu_utilization": CpuUtilization(average=average)}
                            )
                        )
        except (ClientError, BotoCoreError) as e:
            logger.debug("collector.ec2.metrics_unavailable", region=region, error=str(e))
            return instances
        return enriched

    async def get_cpu_average(self, cloudwatch: Any, instance_id: str) -> float | None:
        """
        Mean hourly CPUUtilization over the lookback window.

        Returns None when there are no datapoints or the query fails; metric
        failures never abort the collection.
        """
        end = self.clock()
        start = end - timedelta(days=self.settings.CPU_LOOKBACK_DAYS)
        try:
            response = await cloudwatch.get_metric_statistics(
                Namespace="AWS/EC2",
                MetricName="CPUUtilization",
                Dimensions=[{"Name": "InstanceId", "Value": instance_id}],
                StartTime=start,
                EndTime=end,
                Period=METRIC_PERIOD_SECONDS,
                Statistics=["Average"],
            )
        except (ClientError, BotoCoreError) as e:
            logger.debug("collector.ec2.metrics_unavailable", instance_id=instance_id, error=str(e))
            return None

        datapoints = response.get("Datapoints") or []
        if not datapoints:
            return None

        values = [point.get("Average", 0.0) for point in datapoints]
        return round_money(sum(values) / len(values))
