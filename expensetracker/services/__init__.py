"""Mini README: Collaborators the ledger engine talks to.

The engine only sees narrow interfaces: a key-value store for persistence,
an identity provider naming the signed-in user, an event bus carrying
login/logout signals, a notification sink for user-facing messages, and a
best-effort analytics tracker. Concrete in-process implementations live
alongside each interface so the web interface can run without external
services.
"""

from .analytics import AnalyticsEvent, AnalyticsTracker
from .events import LOGIN, LOGOUT, Event, EventBus
from .identity import IdentityProvider, SessionIdentity, StaticIdentity
from .notifications import Notification, NotificationLog, NotificationSink, Severity
from .storage import InMemoryStore, JsonFileStore, KeyValueStore, StoreError

__all__ = [
    "AnalyticsEvent",
    "AnalyticsTracker",
    "Event",
    "EventBus",
    "IdentityProvider",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "LOGIN",
    "LOGOUT",
    "Notification",
    "NotificationLog",
    "NotificationSink",
    "SessionIdentity",
    "Severity",
    "StaticIdentity",
    "StoreError",
]
