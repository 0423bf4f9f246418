"""Normalized AWS resource schemas.

A ``NormalizedResource`` is a tagged union over the three inventory
variants. Rule evaluation reads fields through ``get_field`` so every
variant is addressed the same way (``state``, ``tags.Environment``,
``cpu_utilization.average``).
"""

import math
from abc import abstractmethod
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from finopsguard.schemas.base import CamelModel
from finopsguard.schemas.savings import PricingAttributes


class ResourceType(str, Enum):
    """Resource variant discriminator values."""

    EC2_INSTANCE = "ec2-instance"
    EBS_VOLUME = "ebs-volume"
    EBS_SNAPSHOT = "ebs-snapshot"


class InstanceState(str, Enum):
    """EC2 instance lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "InstanceState":
        try:
            return cls(value or "unknown")
        except ValueError:
            return cls.UNKNOWN


def _lookup(model: BaseModel, name: str) -> Any:
    """Resolve an attribute by field name or camelCase alias."""
    fields = type(model).model_fields
    if name in fields:
        return getattr(model, name)
    for field_name, info in fields.items():
        if info.alias == name:
            return getattr(model, field_name)
    return None


def days_since(start_time: datetime, now: datetime) -> int:
    """Whole days elapsed since ``start_time`` (floored)."""
    return math.floor((now - start_time).total_seconds() / 86400)


class CpuUtilization(CamelModel):
    """Average CPU utilization over a rolling window."""

    model_config = ConfigDict(frozen=True)

    average: float
    window_label: str = "7-day"


class ResourceBase(CamelModel):
    """Fields common to every normalized resource."""

    model_config = ConfigDict(frozen=True)

    id: str
    region: str
    account_id: str = "unknown"
    tags: dict[str, str] | None = None

    def get_field(self, path: str) -> Any:
        """
        Read a (possibly dotted) field path from this resource.

        ``tags.<Key>`` reads from the tag map. Nested models and dicts are
        traversed segment by segment. Absent values resolve to None and
        enum members resolve to their string value.
        """
        head, _, rest = path.partition(".")

        if head == "tags":
            if not rest:
                return self.tags
            return (self.tags or {}).get(rest)

        value: Any = _lookup(self, head)
        for part in rest.split(".") if rest else []:
            if value is None:
                return None
            if isinstance(value, BaseModel):
                value = _lookup(value, part)
            elif isinstance(value, dict):
                value = value.get(part)
            else:
                return None

        if isinstance(value, Enum):
            return value.value
        return value

    @abstractmethod
    def pricing_attributes(self) -> PricingAttributes:
        """Metadata the savings calculator needs to price this resource."""


class ComputeInstance(ResourceBase):
    """EC2 instance."""

    resource_type: Literal["ec2-instance"] = "ec2-instance"
    instance_id: str
    instance_type: str = "unknown"
    state: InstanceState = InstanceState.UNKNOWN
    launch_time: datetime
    cpu_utilization: CpuUtilization | None = None

    def pricing_attributes(self) -> PricingAttributes:
        return PricingAttributes(instance_type=self.instance_type)


class BlockVolume(ResourceBase):
    """EBS volume."""

    resource_type: Literal["ebs-volume"] = "ebs-volume"
    volume_id: str
    size_gb: int = 0
    volume_type: str = "unknown"
    state: str = "unknown"
    attached: bool = False
    attached_instance_id: str | None = None
    create_time: datetime
    encrypted: bool = False

    def pricing_attributes(self) -> PricingAttributes:
        return PricingAttributes(volume_size_gb=self.size_gb, volume_type=self.volume_type)


class BlockSnapshot(ResourceBase):
    """EBS snapshot."""

    resource_type: Literal["ebs-snapshot"] = "ebs-snapshot"
    snapshot_id: str
    source_volume_id: str | None = None
    volume_size_gb: int = 0
    state: str = "unknown"
    start_time: datetime
    age_in_days: int = 0
    encrypted: bool = False
    description: str | None = None

    def pricing_attributes(self) -> PricingAttributes:
        return PricingAttributes(snapshot_size_gb=self.volume_size_gb)


NormalizedResource = Annotated[
    Union[ComputeInstance, BlockVolume, BlockSnapshot],
    Field(discriminator="resource_type"),
]
