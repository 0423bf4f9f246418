"""Shared aioboto3 plumbing for the AWS provider implementations."""

from datetime import datetime, timezone
from typing import Any, Callable

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from finopsguard.core.config import Settings
from finopsguard.core.exceptions import CollectorError
from finopsguard.schemas.credentials import BaseCredentials

SessionFactory = Callable[..., Any]
DEFAULT_SESSION_FACTORY: SessionFactory = aioboto3.Session

ACCESS_DENIED_CODES = {"AccessDenied", "AccessDeniedException", "UnauthorizedOperation", "AuthFailure"}
THROTTLING_CODES = {"Throttling", "ThrottlingException", "RequestLimitExceeded", "TooManyRequestsException"}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_client_config(settings: Settings) -> Config:
    """
    botocore client configuration shared by every AWS call.

    Standard retry mode retries throttling and transient errors only, so
    idempotent reads get bounded retries without masking real failures.
    """
    return Config(
        connect_timeout=settings.AWS_CONNECT_TIMEOUT,
        read_timeout=settings.AWS_READ_TIMEOUT,
        retries={"max_attempts": settings.AWS_MAX_ATTEMPTS, "mode": "standard"},
    )


def create_session(
    session_factory: SessionFactory, credentials: BaseCredentials | None = None
) -> Any:
    """Create an aioboto3 session, using the default chain when no credentials are given."""
    if credentials is None:
        return session_factory()
    return session_factory(**credentials.session_kwargs())


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


def error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message", str(error))


def tags_to_dict(tags: list[dict[str, str]] | None) -> dict[str, str] | None:
    """Collapse an AWS ``[{Key, Value}]`` tag list, dropping empty keys/values."""
    if not tags:
        return None
    return {tag["Key"]: tag["Value"] for tag in tags if tag.get("Key") and tag.get("Value")}


def classify_listing_error(error: ClientError | BotoCoreError, service: str) -> CollectorError:
    """Map an inventory listing failure onto the collector error taxonomy."""
    if not isinstance(error, ClientError):
        return CollectorError(
            f"Failed to list {service}: {error}",
            "UnknownError",
            service=service,
            original_error=error,
        )

    code = error_code(error)
    message = error_message(error)

    if code in ACCESS_DENIED_CODES:
        return CollectorError(
            f"Access denied listing {service}. Ensure the role has the required Describe permissions.",
            "AccessDenied",
            service=service,
            original_error=error,
        )
    if code in THROTTLING_CODES:
        return CollectorError(
            f"AWS throttled the {service} listing. Please retry the scan shortly.",
            "Throttled",
            service=service,
            original_error=error,
        )
    return CollectorError(
        f"Failed to list {service}: {message}",
        "UnknownError",
        service=service,
        original_error=error,
    )
