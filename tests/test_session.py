"""
Tests for identity providers and the session bootstrapper.
"""

import pytest

from shikkha.catalog import (
    AuthError,
    IdentityProvider,
    LocalIdentityProvider,
    SessionBootstrapper,
)


class FailingProvider(IdentityProvider):
    def sign_in_anonymously(self):
        raise AuthError("auth service unavailable")

    def sign_in_with_token(self, token):
        raise AuthError("token rejected")


class TestLocalIdentityProvider:
    """Test the in-process identity provider."""

    def test_anonymous_identities_are_unique(self):
        provider = LocalIdentityProvider()
        first = provider.sign_in_anonymously()
        second = provider.sign_in_anonymously()
        assert first.is_anonymous
        assert first.uid != second.uid
        assert len(first.uid) == 28

    def test_token_identity_is_stable(self):
        provider = LocalIdentityProvider()
        first = provider.sign_in_with_token("secret-token")
        second = provider.sign_in_with_token("secret-token")
        assert first.uid == second.uid
        assert first.is_anonymous is False

    def test_blank_token_rejected(self):
        with pytest.raises(AuthError):
            LocalIdentityProvider().sign_in_with_token("   ")


class TestSessionBootstrapper:
    """Test identity establishment and listener notification."""

    def test_listener_called_with_current_identity(self):
        session = SessionBootstrapper(LocalIdentityProvider())
        seen = []
        session.on_identity_changed(seen.append)
        assert seen == [None]

    def test_establish_anonymous(self):
        session = SessionBootstrapper(LocalIdentityProvider())
        seen = []
        session.on_identity_changed(seen.append)

        identity = session.establish()

        assert identity is not None
        assert identity.is_anonymous
        assert session.identity == identity
        assert seen == [None, identity]

    def test_establish_with_initial_token(self):
        session = SessionBootstrapper(LocalIdentityProvider(), initial_token="custom")
        identity = session.establish()
        assert identity.is_anonymous is False

    def test_establish_is_idempotent(self):
        session = SessionBootstrapper(LocalIdentityProvider())
        seen = []
        session.on_identity_changed(seen.append)

        first = session.establish()
        second = session.establish()

        assert first == second
        assert len(seen) == 2

    def test_failure_is_logged_not_raised(self, caplog):
        session = SessionBootstrapper(FailingProvider())
        seen = []
        session.on_identity_changed(seen.append)

        assert session.establish() is None
        assert session.identity is None
        assert isinstance(session.last_error, AuthError)
        assert seen == [None]
        assert "Auth failed" in caplog.text

    def test_sign_out_notifies(self):
        session = SessionBootstrapper(LocalIdentityProvider())
        seen = []
        session.on_identity_changed(seen.append)
        session.establish()

        session.sign_out()

        assert session.identity is None
        assert seen[-1] is None

    def test_cancelled_listener_not_notified(self):
        session = SessionBootstrapper(LocalIdentityProvider())
        seen = []
        subscription = session.on_identity_changed(seen.append)
        subscription.cancel()

        session.establish()

        assert seen == [None]
