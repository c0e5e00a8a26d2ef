"""Mini README: Centralised configuration for the expense tracker.

Structure:
    * ExpenseTrackerSettings - pydantic settings model read from the
      environment (``EXPENSETRACKER_`` prefix) and an optional ``.env`` file.
    * get_settings - cached accessor so validation runs once per process.

Usage:
    Import ``get_settings`` to find where ledgers are stored, which port the
    web interface binds to, and how analytics batches events.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExpenseTrackerSettings(BaseSettings):
    """Runtime configuration for the expense tracker."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSETRACKER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the JSON ledger store.",
    )
    store_filename: str = Field(
        "ledgers.json",
        description="File inside the data directory that stores every user's ledger.",
    )
    storage_key_prefix: str = Field(
        "expenseTrackerData",
        description="Namespace combined with the user identity to build storage keys.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the web service exposes.",
        ge=1,
        le=65535,
    )
    app_id: str = Field(
        "expense-tracker",
        description="Application identifier stamped on analytics events.",
    )
    analytics_batch_size: int = Field(
        20,
        description="Queued analytics events that trigger an automatic flush.",
        ge=1,
    )
    analytics_send_interval: float = Field(
        5.0,
        description="Seconds after the last flush before a tracked event triggers another.",
        gt=0,
    )
    notification_history: int = Field(
        25,
        description="How many recent notifications the dashboard keeps.",
        ge=1,
    )
    currency_symbol: str = Field(
        "€",
        description="Symbol prefixed to amounts in user-facing messages.",
    )

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[Union[str, Path]]) -> Path:
        """Expand user directories so ``~/budget`` style values work."""

        return Path(value or "data").expanduser().resolve()

    @property
    def store_path(self) -> Path:
        """Absolute path of the JSON ledger store."""

        return self.data_directory / self.store_filename


@lru_cache()
def get_settings() -> ExpenseTrackerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return ExpenseTrackerSettings()
