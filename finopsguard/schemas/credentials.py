"""AWS credential schemas."""

import re
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from finopsguard.schemas.base import CamelModel

# Matched with fullmatch; ASCII digits only
ROLE_ARN_PATTERN = re.compile(r"arn:aws:iam::[0-9]{12}:role/.+")


class BaseCredentials(CamelModel):
    """Explicit credentials used to call STS."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: str = Field(repr=False)
    session_token: str | None = Field(default=None, repr=False)

    def session_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``aioboto3.Session``."""
        return {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "aws_session_token": self.session_token,
        }


class AssumedCredentials(BaseCredentials):
    """
    Temporary credentials issued by STS AssumeRole.

    Owned by a single scan invocation and never persisted.
    """

    session_token: str = Field(repr=False)
    expiration: datetime
