"""Mini README: Application service the user interface talks to.

Structure:
    * ExportBundle - snapshot plus a suggested download filename.
    * ExpenseTracker - wraps a LedgerEngine with sign-in checks, one save per
      mutation, user notifications and analytics events.
    * build_tracker - wires the default collaborators from settings.

The engine raises on validation failures; this layer turns each failure into
an ``error`` notification and re-raises so HTTP handlers can choose a status
code. Storage failures do not undo a mutation that already happened: they are
logged and reported to the user as unsaved changes. After a failed load,
saving is paused until the next successful load so the stored ledger is not
replaced by the empty one held in memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

from .configuration import ExpenseTrackerSettings, get_settings
from .finance import (
    AuthenticationRequiredError,
    Category,
    InsufficientBudgetError,
    LedgerEngine,
    LedgerError,
    PersistenceError,
    Transaction,
)
from .finance.ledger import FILTER_ALL
from .logging_utils import get_logger
from .services import (
    LOGIN,
    LOGOUT,
    AnalyticsTracker,
    Event,
    EventBus,
    JsonFileStore,
    KeyValueStore,
    NotificationLog,
    NotificationSink,
    SessionIdentity,
    Severity,
)

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ExportBundle:
    filename: str
    snapshot: Dict[str, object]


class ExpenseTracker:
    """Coordinate the ledger with its collaborators for one signed-in user."""

    def __init__(
        self,
        engine: LedgerEngine,
        identity: SessionIdentity,
        notifier: NotificationSink,
        analytics: AnalyticsTracker,
        bus: EventBus,
        *,
        currency_symbol: str = "€",
        today: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.engine = engine
        self.identity = identity
        self.notifier = notifier
        self.analytics = analytics
        self.current_filter = FILTER_ALL
        self.load_failed = False
        self._currency = currency_symbol
        self._today = today or (lambda: datetime.now(timezone.utc))
        bus.subscribe(LOGIN, self._on_login)
        bus.subscribe(LOGOUT, self._on_logout)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Load whatever ledger belongs to the current user."""

        self._load()
        self.analytics.page_view()

    def _on_login(self, event: Event) -> None:
        LOGGER.debug("Reloading ledger after login of %s", event.payload.get("username"))
        self._load()

    def _on_logout(self, event: Event) -> None:
        LOGGER.debug("Dropping ledger after logout of %s", event.payload.get("username"))
        self.load_failed = False
        self.engine.load()

    def _load(self) -> None:
        try:
            self.engine.load()
        except PersistenceError:
            self.load_failed = True
            LOGGER.exception("Failed to load ledger for %s", self.current_user)
            self.notifier.notify("Your saved data could not be loaded", Severity.ERROR)
        else:
            self.load_failed = False

    @property
    def current_user(self) -> Optional[str]:
        return self.identity.current_user_identity()

    def _ensure_auth(self) -> None:
        if not self.current_user:
            error = AuthenticationRequiredError()
            self.notifier.notify(error.message, Severity.ERROR)
            raise error

    def _persist(self) -> None:
        # The stored ledger is still intact; writing now would replace it.
        if self.load_failed:
            LOGGER.warning("Not saving ledger for %s: it failed to load", self.current_user)
            self.notifier.notify(
                "Changes are not being saved because your saved data could not be loaded",
                Severity.ERROR,
            )
            return
        try:
            self.engine.save()
        except PersistenceError:
            LOGGER.exception("Failed to save ledger for %s", self.current_user)
            self.notifier.notify("Changes could not be saved", Severity.ERROR)

    def _reject(self, error: LedgerError) -> None:
        if isinstance(error, InsufficientBudgetError):
            message = f"Not enough budget. Available: {self._currency}{error.available:.2f}"
        else:
            message = error.message
        self.notifier.notify(message, Severity.ERROR)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def add_income(self, amount: object, description: object) -> Transaction:
        self._ensure_auth()
        try:
            transaction = self.engine.add_income(amount, description)
        except LedgerError as error:
            self._reject(error)
            raise
        self._persist()
        self.notifier.notify("Income added", Severity.SUCCESS)
        self.analytics.track(
            "income_added",
            {"amount": transaction.amount, "description": transaction.description},
        )
        return transaction

    def add_expense(
        self, category: Union[str, Category], amount: object, description: object
    ) -> Transaction:
        self._ensure_auth()
        try:
            transaction = self.engine.add_expense(category, amount, description)
        except LedgerError as error:
            self._reject(error)
            raise
        self._persist()
        self.notifier.notify("Expense added", Severity.SUCCESS)
        self.analytics.track(
            "expense_added",
            {
                "category": transaction.category.value,
                "amount": transaction.amount,
                "description": transaction.description,
            },
        )
        return transaction

    def delete_transaction(self, transaction_id: int) -> Transaction:
        try:
            transaction = self.engine.delete_transaction(transaction_id)
        except LedgerError as error:
            self._reject(error)
            raise
        self._persist()
        self.notifier.notify("Transaction deleted", Severity.SUCCESS)
        self.analytics.track(
            "transaction_deleted",
            {
                "id": transaction.id,
                "type": transaction.type.value,
                "category": transaction.category.value,
                "amount": transaction.amount,
            },
        )
        return transaction

    def new_month(self) -> None:
        """Start over with an empty ledger; previous entries are discarded."""

        self.engine.clear_all()
        self._persist()
        self.notifier.notify("New month started", Severity.SUCCESS)
        self.analytics.track("new_month", {})

    def change_filter(self, category_filter: str) -> List[Transaction]:
        try:
            transactions = self.engine.list_transactions(category_filter)
        except LedgerError as error:
            self._reject(error)
            raise
        self.current_filter = category_filter.strip().lower()
        self.analytics.track("filter_changed", {"filter": self.current_filter})
        return transactions

    def list_transactions(self) -> List[Transaction]:
        return self.engine.list_transactions(self.current_filter)

    def export_data(self) -> ExportBundle:
        self._ensure_auth()
        snapshot = self.engine.export_snapshot()
        filename = f"expenses-{self._today().date().isoformat()}.json"
        self.notifier.notify("Data exported", Severity.SUCCESS)
        self.analytics.track("data_exported", {"count": len(snapshot["transactions"])})
        return ExportBundle(filename=filename, snapshot=snapshot)


def build_tracker(
    settings: Optional[ExpenseTrackerSettings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    analytics: Optional[AnalyticsTracker] = None,
) -> ExpenseTracker:
    """Create a tracker with the default in-process collaborators."""

    settings = settings or get_settings()
    bus = EventBus()
    analytics = analytics or AnalyticsTracker(
        app_id=settings.app_id,
        batch_size=settings.analytics_batch_size,
        send_interval=settings.analytics_send_interval,
    )
    identity = SessionIdentity(bus, analytics=analytics)
    engine = LedgerEngine(
        identity,
        store if store is not None else JsonFileStore(settings.store_path),
        key_prefix=settings.storage_key_prefix,
    )
    tracker = ExpenseTracker(
        engine,
        identity,
        NotificationLog(limit=settings.notification_history),
        analytics,
        bus,
        currency_symbol=settings.currency_symbol,
    )
    LOGGER.debug("Tracker wired with store key prefix %s", settings.storage_key_prefix)
    return tracker
