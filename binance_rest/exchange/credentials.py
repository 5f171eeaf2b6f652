"""
API credential storage.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .exceptions import MissingCredentialError


API_KEY = "API KEY"
SECRET_KEY = "SECRET KEY"


@dataclass(frozen=True)
class Credentials:
    """
    API key and secret key owned by a single client.

    Instances are immutable; use ``with_api_key``/``with_secret_key``
    (or the client builder) to derive a configured copy.
    """
    api_key: Optional[str] = None
    secret_key: Optional[str] = None

    def with_api_key(self, value: str) -> "Credentials":
        return replace(self, api_key=value)

    def with_secret_key(self, value: str) -> "Credentials":
        return replace(self, secret_key=value)

    def require_api_key(self) -> str:
        """
        Get the API key.

        Raises:
            MissingCredentialError: If no API key is configured
        """
        if self.api_key is None:
            raise MissingCredentialError(API_KEY)
        return self.api_key

    def require_secret_key(self) -> str:
        """
        Get the secret key.

        Raises:
            MissingCredentialError: If no secret key is configured
        """
        if self.secret_key is None:
            raise MissingCredentialError(SECRET_KEY)
        return self.secret_key

    def __repr__(self) -> str:
        return (
            f"Credentials(api_key={'***' if self.api_key is not None else None}, "
            f"secret_key={'***' if self.secret_key is not None else None})"
        )
