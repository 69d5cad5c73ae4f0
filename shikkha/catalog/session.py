"""
Session bootstrapping - establish an identity before any data access.

Provides:
- IdentityProvider: sign-in boundary (anonymous or custom token)
- LocalIdentityProvider: in-process provider for a self-hosted catalog
- SessionBootstrapper: signs in once and notifies identity listeners
"""

import hashlib
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Optional

from shikkha.schemas import Identity

from .errors import AuthError
from .store import Subscription


logger = logging.getLogger(__name__)

IdentityCallback = Callable[[Optional[Identity]], None]


class IdentityProvider(ABC):
    """Abstract sign-in backend."""

    @abstractmethod
    def sign_in_anonymously(self) -> Identity:
        """Create a fresh anonymous identity."""

    @abstractmethod
    def sign_in_with_token(self, token: str) -> Identity:
        """Exchange a custom token for an identity. Raises AuthError."""


class LocalIdentityProvider(IdentityProvider):
    """
    Issues identities without a remote auth service.

    Anonymous sessions get a random uid; a custom token always maps to the
    same uid (first 28 hex chars of its SHA-256 digest).
    """

    def sign_in_anonymously(self) -> Identity:
        return Identity(uid=uuid.uuid4().hex[:28], is_anonymous=True)

    def sign_in_with_token(self, token: str) -> Identity:
        if not token or not token.strip():
            raise AuthError("Custom auth token is empty")
        digest = hashlib.sha256(token.strip().encode("utf-8")).hexdigest()
        return Identity(uid=digest[:28], is_anonymous=False)


class SessionBootstrapper:
    """
    Establish and track the current identity.

    Listeners registered with on_identity_changed() are called with the
    current identity immediately and again whenever it changes.
    """

    def __init__(self, provider: IdentityProvider, initial_token: Optional[str] = None):
        """
        Args:
            provider: Sign-in backend
            initial_token: Custom token to use instead of anonymous sign-in
        """
        self.provider = provider
        self.initial_token = initial_token
        self._identity: Optional[Identity] = None
        self._listeners: list[IdentityCallback] = []
        self._lock = threading.Lock()
        self.last_error: Optional[AuthError] = None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    def on_identity_changed(self, callback: IdentityCallback) -> Subscription:
        with self._lock:
            self._listeners.append(callback)
        callback(self._identity)
        return Subscription(lambda: self._remove_listener(callback))

    def _remove_listener(self, callback: IdentityCallback):
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _set_identity(self, identity: Optional[Identity]):
        self._identity = identity
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            callback(identity)

    def establish(self) -> Optional[Identity]:
        """
        Sign in with the configured token, or anonymously when none is set.

        Returns:
            The established identity, or None if sign-in failed (logged)
        """
        if self._identity is not None:
            return self._identity

        try:
            if self.initial_token:
                identity = self.provider.sign_in_with_token(self.initial_token)
            else:
                identity = self.provider.sign_in_anonymously()
        except AuthError as e:
            self.last_error = e
            logger.error(f"Auth failed: {e}")
            return None

        self.last_error = None
        logger.info(f"Signed in as {identity.uid} (anonymous={identity.is_anonymous})")
        self._set_identity(identity)
        return identity

    def sign_out(self):
        """Clear the identity and notify listeners."""
        if self._identity is None:
            return
        logger.info(f"Signed out {self._identity.uid}")
        self._set_identity(None)
