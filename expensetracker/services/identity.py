"""Mini README: Identity providers naming the signed-in user.

Structure:
    * IdentityProvider - interface exposing ``current_user_identity``.
    * StaticIdentity - fixed identity, used by the CLI export command.
    * SessionIdentity - mutable session that publishes login/logout events.

Password checks and hosted authentication backends are out of scope: signing
in simply names the user whose ledger should be loaded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from ..logging_utils import get_logger
from .events import LOGIN, LOGOUT, EventBus

if TYPE_CHECKING:
    from .analytics import AnalyticsTracker

LOGGER = get_logger(__name__)


class IdentityProvider(ABC):
    """Expose the identity used to key a user's stored ledger."""

    @abstractmethod
    def current_user_identity(self) -> Optional[str]:
        """Return the signed-in user's identity, or None."""


class StaticIdentity(IdentityProvider):
    """Identity that never changes."""

    def __init__(self, username: Optional[str]) -> None:
        self._username = username or None

    def current_user_identity(self) -> Optional[str]:
        return self._username


class SessionIdentity(IdentityProvider):
    """Track who is signed in and announce changes on the event bus."""

    def __init__(
        self,
        bus: EventBus,
        *,
        analytics: Optional["AnalyticsTracker"] = None,
        username: Optional[str] = None,
    ) -> None:
        self._bus = bus
        self._analytics = analytics
        self._username = username or None

    def current_user_identity(self) -> Optional[str]:
        return self._username

    def sign_in(self, username: str) -> str:
        """Make ``username`` the current user and publish ``login``."""

        cleaned = (username or "").strip()
        if not cleaned:
            raise ValueError("A username is required to sign in")
        self._username = cleaned
        LOGGER.info("User %s signed in", cleaned)
        self._bus.publish(LOGIN, {"username": cleaned})
        if self._analytics:
            self._analytics.track("user_logged_in", {"username": cleaned})
        return cleaned

    def sign_out(self) -> Optional[str]:
        """Forget the current user and publish ``logout``."""

        previous = self._username
        self._username = None
        LOGGER.info("User %s signed out", previous)
        self._bus.publish(LOGOUT, {"username": previous})
        if self._analytics:
            self._analytics.track("user_logged_out", {"username": previous})
        return previous
