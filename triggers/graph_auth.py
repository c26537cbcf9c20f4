"""
RTA Poller — Microsoft Graph app-only credentials
Client-credential exchange delegated to azure-identity.
Tokens are held in memory only and never persisted.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential

logger = logging.getLogger("rta.auth")

_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
_DEFAULT_AUTHORITY = "https://login.microsoftonline.com"


class AuthError(Exception):
    """The identity provider did not return a usable token."""


@dataclass(frozen=True)
class Credential:
    """Bearer token plus the time it was acquired (epoch seconds)."""
    token: str
    acquired_at: float

    def age(self, now: float) -> float:
        return now - self.acquired_at

    def is_stale(self, max_age: float, now: float) -> bool:
        return self.age(now) > max_age


class GraphCredentialProvider:
    """Acquires and refreshes Graph bearer tokens for an app registration."""

    def __init__(self, tenant_id: str, client_id: str, client_secret: str,
                 scope: str = _DEFAULT_SCOPE,
                 authority_host: str = _DEFAULT_AUTHORITY,
                 credential_factory: Optional[Callable[[], object]] = None,
                 clock: Callable[[], float] = time.time):
        self._scope = scope
        self._clock = clock
        if credential_factory is None:
            def credential_factory():
                return ClientSecretCredential(
                    tenant_id, client_id, client_secret,
                    authority=authority_host,
                )
        self._factory = credential_factory
        self._credential = None

    def acquire(self) -> Credential:
        """Exchange client id/secret for a fresh bearer token."""
        if self._credential is None:
            self._credential = self._factory()

        try:
            access = self._credential.get_token(self._scope)
        except AzureError as e:
            logger.error(f"Token acquisition failed: {e}")
            raise AuthError(f"Failed to get app token: {e}") from e

        token = getattr(access, "token", None)
        if not token:
            logger.error("Token acquisition returned no access token")
            raise AuthError("Failed to get app token")

        logger.info("Graph app token acquired")
        return Credential(token=token, acquired_at=self._clock())

    def reset(self):
        """Drop the identity credential so the next acquire() skips its token cache."""
        if self._credential is not None:
            close = getattr(self._credential, "close", None)
            if callable(close):
                close()
        self._credential = None
