"""Mini README: Tests for the collaborator services.

Covers the event bus, the session identity's login/logout signals, the
notification history and the analytics batcher's queue and failure handling.
"""

from __future__ import annotations

import pytest

from expensetracker.services import (
    LOGIN,
    LOGOUT,
    AnalyticsTracker,
    EventBus,
    NotificationLog,
    SessionIdentity,
    Severity,
)


def test_event_bus_delivers_in_subscription_order() -> None:
    bus = EventBus()
    received = []
    bus.subscribe("ping", lambda event: received.append(("first", event.payload["n"])))
    bus.subscribe("ping", lambda event: received.append(("second", event.payload["n"])))

    bus.publish("ping", {"n": 1})

    assert received == [("first", 1), ("second", 1)]
    assert bus.publish("unknown") == []


def test_event_bus_unsubscribe() -> None:
    bus = EventBus()
    received = []
    handler = received.append
    bus.subscribe("ping", handler)
    bus.unsubscribe("ping", handler)

    bus.publish("ping")

    assert received == []


def test_session_identity_publishes_login_and_logout() -> None:
    bus = EventBus()
    events = []
    bus.subscribe(LOGIN, events.append)
    bus.subscribe(LOGOUT, events.append)
    identity = SessionIdentity(bus)

    identity.sign_in("  ana ")
    assert identity.current_user_identity() == "ana"
    identity.sign_out()

    assert identity.current_user_identity() is None
    assert [(event.name, event.payload["username"]) for event in events] == [
        (LOGIN, "ana"),
        (LOGOUT, "ana"),
    ]


def test_session_identity_requires_username() -> None:
    identity = SessionIdentity(EventBus())

    with pytest.raises(ValueError):
        identity.sign_in("   ")
    assert identity.current_user_identity() is None


def test_notification_log_keeps_newest_first_within_limit() -> None:
    log = NotificationLog(limit=2)

    log.notify("one")
    log.notify("two", Severity.SUCCESS)
    log.notify("three", Severity.ERROR)

    assert [item.message for item in log.recent()] == ["three", "two"]
    assert log.recent()[0].severity is Severity.ERROR
    assert log.recent()[0].as_dict()["severity"] == "error"


def test_analytics_without_sender_only_logs() -> None:
    tracker = AnalyticsTracker(app_id="demo")

    event = tracker.track("income_added", {"amount": 10})

    assert tracker.enabled is False
    assert tracker.pending == 0
    assert tracker.flush() == 0
    assert event.as_dict()["appId"] == "demo"
    assert event.session_id.startswith("s_")


def test_analytics_batches_until_flush() -> None:
    sent = []
    tracker = AnalyticsTracker(sender=sent.append, batch_size=10, clock=lambda: 1.5)

    tracker.track("filter_changed", {"filter": "fixed"})
    tracker.track("new_month")
    assert sent == []
    assert tracker.pending == 2

    assert tracker.flush() == 2

    assert tracker.pending == 0
    assert [event["event"] for event in sent[0]["events"]] == ["filter_changed", "new_month"]
    assert sent[0]["events"][0]["ts"] == 1500
    assert sent[0]["events"][0]["payload"] == {"filter": "fixed"}


def test_analytics_flushes_when_batch_is_full() -> None:
    sent = []
    tracker = AnalyticsTracker(sender=sent.append, batch_size=2)

    tracker.track("a")
    tracker.track("b")
    tracker.track("c")

    assert len(sent) == 1
    assert tracker.pending == 1


def test_analytics_page_view_flushes_immediately() -> None:
    sent = []
    tracker = AnalyticsTracker(sender=sent.append)

    tracker.page_view(referrer="https://example.org")

    assert sent[0]["events"][0]["event"] == "page_view"
    assert sent[0]["events"][0]["payload"] == {"referrer": "https://example.org"}


def test_analytics_delivery_failures_are_dropped() -> None:
    def broken_sender(body):
        raise ConnectionError("offline")

    tracker = AnalyticsTracker(sender=broken_sender, batch_size=5)
    tracker.track("expense_added")

    assert tracker.flush() == 1
    assert tracker.pending == 0


def test_analytics_flushes_when_send_interval_has_passed() -> None:
    now = [100.0]
    sent = []
    tracker = AnalyticsTracker(
        sender=sent.append, batch_size=50, send_interval=5.0, clock=lambda: now[0]
    )

    tracker.track("a")
    now[0] = 103.0
    tracker.track("b")
    assert sent == []

    now[0] = 105.0
    tracker.track("c")

    assert [event["event"] for event in sent[0]["events"]] == ["a", "b", "c"]
    assert tracker.pending == 0

    now[0] = 107.0
    tracker.track("d")
    assert tracker.pending == 1
