"""Mini README: Tiny synchronous publish/subscribe bus.

Structure:
    * Event - named tuple passed to handlers (name, ISO timestamp, payload).
    * EventBus - subscribe/unsubscribe/publish by event name.
    * LOGIN / LOGOUT - signals published by the identity provider.

Handlers run in subscription order on the publishing thread; a handler that
raises stops the publish and propagates to the caller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, List, NamedTuple, Optional

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

LOGIN = "login"
LOGOUT = "logout"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event], object]


class EventBus:
    """Route named events to the handlers subscribed to them."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: Optional[dict] = None) -> List[object]:
        """Deliver an event and return each handler's result."""

        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []
        event = Event(
            name=name,
            ts=datetime.now(timezone.utc).isoformat(),
            payload=dict(payload or {}),
        )
        LOGGER.debug("Publishing %s to %s handlers", name, len(handlers))
        return [handler(event) for handler in handlers]
