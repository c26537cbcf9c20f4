"""
Unit tests for the Graph credential provider — token acquisition and reset.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ClientAuthenticationError

from triggers.graph_auth import AuthError, Credential, GraphCredentialProvider

SCOPE = "https://graph.microsoft.com/.default"


def _provider(identity, clock):
    factory = MagicMock(return_value=identity)
    provider = GraphCredentialProvider(
        "tenant", "client", "secret", credential_factory=factory, clock=clock,
    )
    return provider, factory


def test_acquire_returns_token_and_timestamp(clock):
    identity = MagicMock()
    identity.get_token.return_value = SimpleNamespace(token="abc", expires_on=0)
    provider, factory = _provider(identity, clock)

    cred = provider.acquire()

    assert cred == Credential(token="abc", acquired_at=clock.now)
    identity.get_token.assert_called_once_with(SCOPE)
    factory.assert_called_once()


def test_identity_credential_is_reused_between_acquires(clock):
    identity = MagicMock()
    identity.get_token.return_value = SimpleNamespace(token="abc", expires_on=0)
    provider, factory = _provider(identity, clock)

    provider.acquire()
    provider.acquire()

    assert factory.call_count == 1


def test_reset_rebuilds_identity_credential(clock):
    identity = MagicMock()
    identity.get_token.return_value = SimpleNamespace(token="abc", expires_on=0)
    provider, factory = _provider(identity, clock)

    provider.acquire()
    provider.reset()
    provider.acquire()

    assert factory.call_count == 2
    identity.close.assert_called_once()


def test_identity_failure_raises_auth_error(clock):
    identity = MagicMock()
    identity.get_token.side_effect = ClientAuthenticationError(message="AADSTS7000215: invalid secret")
    provider, _ = _provider(identity, clock)

    with pytest.raises(AuthError) as ctx:
        provider.acquire()
    assert "AADSTS7000215" in str(ctx.value)


def test_missing_token_raises_auth_error(clock):
    identity = MagicMock()
    identity.get_token.return_value = SimpleNamespace(token="", expires_on=0)
    provider, _ = _provider(identity, clock)

    with pytest.raises(AuthError, match="Failed to get app token"):
        provider.acquire()


def test_credential_staleness():
    cred = Credential(token="t", acquired_at=100.0)
    assert cred.age(160.0) == 60.0
    assert not cred.is_stale(3000, 3100.0)
    assert cred.is_stale(3000, 3100.5)
