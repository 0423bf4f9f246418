"""STS AssumeRole credential broker."""

from datetime import datetime, timedelta, timezone

import structlog
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from finopsguard.core.config import Settings
from finopsguard.core.exceptions import AssumeRoleError
from finopsguard.providers.aws.client import (
    DEFAULT_SESSION_FACTORY,
    SessionFactory,
    build_client_config,
    create_session,
    error_code,
    error_message,
)
from finopsguard.providers.base import CredentialBroker
from finopsguard.schemas.credentials import ROLE_ARN_PATTERN, AssumedCredentials, BaseCredentials

logger = structlog.get_logger()

# STS AssumeRole limits
MIN_DURATION_SECONDS = 900
MAX_DURATION_SECONDS = 43200
MAX_SESSION_NAME_LENGTH = 64

NO_CREDENTIALS_MESSAGE = (
    "Could not load AWS credentials. Provide base credentials via environment variables "
    "(AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY), an IAM instance profile, or explicitly."
)


def validate_role_arn(role_arn: str) -> None:
    """
    Check the role ARN shape locally.

    Raises:
        AssumeRoleError: With code InvalidRoleArn if the ARN is malformed
    """
    if not isinstance(role_arn, str) or not ROLE_ARN_PATTERN.fullmatch(role_arn):
        raise AssumeRoleError(f"Invalid role ARN format: {role_arn}", "InvalidRoleArn")


def clamp_duration(duration_seconds: int) -> int:
    return max(MIN_DURATION_SECONDS, min(duration_seconds, MAX_DURATION_SECONDS))


def classify_assume_role_error(error: ClientError, role_arn: str) -> AssumeRoleError:
    """Map an STS ClientError onto the broker's error codes."""
    code = error_code(error)

    if code == "AccessDenied":
        return AssumeRoleError(
            f"Access denied when assuming role {role_arn}. Check IAM trust policy and permissions.",
            "AccessDenied",
            error,
        )
    if code in ("InvalidClientTokenId", "SignatureDoesNotMatch"):
        return AssumeRoleError(
            "Invalid AWS credentials. Check your access key and secret.",
            "InvalidCredentials",
            error,
        )
    if code == "MalformedPolicyDocument":
        return AssumeRoleError(
            "Malformed IAM policy document in role trust policy.",
            "MalformedPolicy",
            error,
        )
    return AssumeRoleError(
        f"Failed to assume role: {error_message(error)}",
        "UnknownError",
        error,
    )


class AWSCredentialBroker(CredentialBroker):
    """Credential broker backed by STS AssumeRole."""

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = DEFAULT_SESSION_FACTORY,
    ) -> None:
        self.settings = settings
        self.config = build_client_config(settings)
        self.session_factory = session_factory

    async def assume_role(
        self,
        role_arn: str,
        session_name: str,
        external_id: str | None = None,
        base_credentials: BaseCredentials | None = None,
        duration_seconds: int = 3600,
    ) -> AssumedCredentials:
        validate_role_arn(role_arn)
        duration = clamp_duration(duration_seconds)

        params = {
            "RoleArn": role_arn,
            "RoleSessionName": session_name[:MAX_SESSION_NAME_LENGTH],
            "DurationSeconds": duration,
        }
        if external_id:
            params["ExternalId"] = external_id

        logger.info(
            "sts.assume_role_start",
            role_arn=role_arn,
            session_name=params["RoleSessionName"],
            explicit_base_credentials=base_credentials is not None,
        )

        session = create_session(self.session_factory, base_credentials)
        try:
            async with session.client(
                "sts", region_name=self.settings.STS_REGION, config=self.config
            ) as sts:
                response = await sts.assume_role(**params)

        except ClientError as e:
            failure = classify_assume_role_error(e, role_arn)
            logger.warning("sts.assume_role_failed", role_arn=role_arn, code=failure.code)
            raise failure from e

        except (NoCredentialsError, PartialCredentialsError) as e:
            logger.warning("sts.no_base_credentials", role_arn=role_arn)
            raise AssumeRoleError(
                f"{NO_CREDENTIALS_MESSAGE} Original error: {e}", "NoCredentials", e
            ) from e

        except BotoCoreError as e:
            logger.error("sts.assume_role_error", role_arn=role_arn, error=str(e))
            raise AssumeRoleError(
                f"Unexpected error assuming role: {e}", "UnknownError", e
            ) from e

        credentials = response.get("Credentials")
        if not credentials:
            raise AssumeRoleError("No credentials returned from AssumeRole", "NoCredentials")

        if not all(
            credentials.get(key) for key in ("AccessKeyId", "SecretAccessKey", "SessionToken")
        ):
            raise AssumeRoleError(
                "Incomplete credentials returned from AssumeRole", "NoCredentials"
            )

        expiration = credentials.get("Expiration") or (
            datetime.now(timezone.utc) + timedelta(seconds=duration)
        )

        logger.info("sts.assume_role_success", role_arn=role_arn, expiration=str(expiration))

        return AssumedCredentials(
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretAccessKey"],
            session_token=credentials["SessionToken"],
            expiration=expiration,
        )
