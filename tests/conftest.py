"""Mini README: Shared fixtures for the expense tracker tests.

Structure:
    * TickingClock - deterministic clock advancing one minute per call.
    * FailingStore - in-memory store whose writes always fail.
    * clock / store / settings fixtures used across modules.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict

import pytest

from expensetracker.configuration import ExpenseTrackerSettings
from expensetracker.services import InMemoryStore, StoreError


class TickingClock:
    """Return a new timestamp, one minute later, on every call."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


class FrozenClock:
    """Always return the same timestamp."""

    def __init__(self, value: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value


class FailingStore(InMemoryStore):
    """Reads work, writes raise StoreError."""

    def set(self, key: str, value: Dict[str, object]) -> None:
        raise StoreError("disk full")


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def settings(tmp_path) -> ExpenseTrackerSettings:
    return ExpenseTrackerSettings(
        environment="test",
        data_directory=tmp_path,
        analytics_batch_size=1,
    )


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


class RecordingStore(InMemoryStore):
    """In-memory store remembering which keys were written, in order."""

    def __init__(self) -> None:
        super().__init__()
        self.written_keys = []

    def set(self, key: str, value: Dict[str, object]) -> None:
        self.written_keys.append(key)
        super().set(key, value)


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()
