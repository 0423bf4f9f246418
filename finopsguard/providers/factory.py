"""Provider composition."""

import structlog

from finopsguard.core.config import Settings
from finopsguard.providers.aws.client import DEFAULT_SESSION_FACTORY, SessionFactory
from finopsguard.providers.aws.cost_explorer import AWSCostCollector
from finopsguard.providers.aws.ebs import AWSSnapshotCollector, AWSVolumeCollector
from finopsguard.providers.aws.ec2 import AWSInstanceCollector
from finopsguard.providers.aws.permissions import AWSPermissionProber
from finopsguard.providers.aws.sts import AWSCredentialBroker
from finopsguard.providers.base import ProviderSet
from finopsguard.providers.mock.providers import (
    MockCostCollector,
    MockCredentialBroker,
    MockInstanceCollector,
    MockPermissionProber,
    MockSnapshotCollector,
    MockVolumeCollector,
)

logger = structlog.get_logger()


def build_provider_set(
    settings: Settings, session_factory: SessionFactory = DEFAULT_SESSION_FACTORY
) -> ProviderSet:
    """
    Select the AWS or mock implementation of every provider interface.

    The choice is made once, from ``settings.MOCK_AWS``; nothing downstream
    checks the mode again.
    """
    if settings.MOCK_AWS:
        logger.info("providers.selected", mode="mock")
        return ProviderSet(
            broker=MockCredentialBroker(),
            prober=MockPermissionProber(),
            instances=MockInstanceCollector(),
            volumes=MockVolumeCollector(),
            snapshots=MockSnapshotCollector(),
            costs=MockCostCollector(),
        )

    logger.info("providers.selected", mode="aws")
    return ProviderSet(
        broker=AWSCredentialBroker(settings, session_factory),
        prober=AWSPermissionProber(settings, session_factory),
        instances=AWSInstanceCollector(settings, session_factory),
        volumes=AWSVolumeCollector(settings, session_factory),
        snapshots=AWSSnapshotCollector(settings, session_factory),
        costs=AWSCostCollector(settings, session_factory),
    )
