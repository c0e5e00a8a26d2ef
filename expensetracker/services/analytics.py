"""Mini README: Best-effort analytics event batching.

Structure:
    * AnalyticsEvent - one tracked event with session and page context.
    * AnalyticsTracker - queues events and hands batches to a sender.

Without a sender the tracker simply logs each event, which is the useful
behaviour during development. With a sender, events are queued and
``flush`` passes ``{"events": [...]}`` to it when asked, once the queue
reaches ``batch_size``, or when an event arrives ``send_interval`` seconds or
more after the previous flush. The application ships no sender; embedders
that want delivery build a tracker with one and hand it to
``build_tracker``. Delivery failures are logged and the batch is dropped:
analytics must never interfere with recording transactions.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

Sender = Callable[[Dict[str, object]], object]


@dataclass(slots=True)
class AnalyticsEvent:
    app_id: str
    session_id: str
    event: str
    ts: int
    page: str
    payload: Dict[str, object] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, object]:
        return {
            "appId": self.app_id,
            "sessionId": self.session_id,
            "event": self.event,
            "payload": dict(self.payload),
            "ts": self.ts,
            "page": self.page,
        }


class AnalyticsTracker:
    """Collect named events and deliver them in batches."""

    def __init__(
        self,
        *,
        app_id: str = "expense-tracker",
        sender: Optional[Sender] = None,
        batch_size: int = 20,
        page: str = "/",
        send_interval: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.app_id = app_id
        self.session_id = f"s_{uuid4().hex}"
        self.page = page
        self._sender = sender
        self._batch_size = max(1, batch_size)
        self._clock = clock
        self._queue: List[AnalyticsEvent] = []
        self._send_interval = send_interval
        self._last_flush = clock()

    @property
    def enabled(self) -> bool:
        return self._sender is not None

    @property
    def pending(self) -> int:
        return len(self._queue)

    def track(self, event: str, payload: Optional[Dict[str, object]] = None) -> AnalyticsEvent:
        """Record an event; never raises because of delivery problems."""

        record = AnalyticsEvent(
            app_id=self.app_id,
            session_id=self.session_id,
            event=event,
            ts=int(self._clock() * 1000),
            page=self.page,
            payload=dict(payload or {}),
        )
        if not self.enabled:
            LOGGER.info("[Analytics] %s %s", event, record.payload)
            return record
        self._queue.append(record)
        if len(self._queue) >= self._batch_size or self._interval_elapsed():
            self.flush()
        return record

    def _interval_elapsed(self) -> bool:
        if self._send_interval is None:
            return False
        return self._clock() - self._last_flush >= self._send_interval

    def page_view(self, referrer: Optional[str] = None) -> None:
        self.track("page_view", {"referrer": referrer})
        self.flush()

    def flush(self) -> int:
        """Send queued events; returns how many events left the queue."""

        if not self.enabled or not self._queue:
            return 0
        batch, self._queue = self._queue, []
        self._last_flush = self._clock()
        body = {"events": [record.as_dict() for record in batch]}
        try:
            self._sender(body)
        except Exception as exc:
            LOGGER.warning("Analytics delivery of %s events failed: %s", len(batch), exc)
        return len(batch)
