"""Mini README: In-memory transaction ledger with 50/30/20 budget allocation.

Structure:
    * TransactionType - enum representing income versus expense entries.
    * Category - enum of the buckets a transaction is booked against.
    * Transaction - dataclass storing a single ledger entry.
    * LedgerEngine - validates and records transactions, derives budgets,
      and loads/saves its state through an injected key-value store.

Income is split into three buckets: 50% for fixed expenses, 30% for variable
expenses and the remaining 20% as savings (never backed by transactions).
Running totals are recomputed from the transaction list whenever they are
read, so no mutation path can leave them out of step with the entries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..logging_utils import get_logger
from ..services.identity import IdentityProvider
from ..services.storage import KeyValueStore, StoreError
from .errors import (
    EmptyDescriptionError,
    InsufficientBudgetError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidFilterError,
    PersistenceError,
    TransactionNotFoundError,
)

LOGGER = get_logger(__name__)

DEFAULT_KEY_PREFIX = "expenseTrackerData"
FILTER_ALL = "all"


class TransactionType(str, Enum):
    """Enumerate whether money came in or went out."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def from_str(cls, value: Union[str, "TransactionType"]) -> "TransactionType":
        """Coerce arbitrary casing into a valid transaction type."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise InvalidCategoryError(f"Unsupported transaction type: {value}") from error


class Category(str, Enum):
    """Budget bucket a transaction is booked against."""

    INCOME = "income"
    FIXED = "fixed"
    VARIABLE = "variable"

    @classmethod
    def from_str(cls, value: Union[str, "Category"]) -> "Category":
        """Coerce arbitrary casing into a valid category."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise InvalidCategoryError(f"Unsupported category: {value}") from error


EXPENSE_CATEGORIES = (Category.FIXED, Category.VARIABLE)
LIST_FILTERS = (FILTER_ALL,) + tuple(category.value for category in Category)


@dataclass(slots=True)
class Transaction:
    """Represent a single ledger entry."""

    id: int
    type: TransactionType
    category: Category
    amount: float
    description: str
    date: datetime

    def as_dict(self) -> Dict[str, object]:
        """Export the transaction with JSON-serialisable values."""

        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category.value,
            "amount": self.amount,
            "description": self.description,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "Transaction":
        """Rebuild a transaction from :meth:`as_dict` output."""

        return cls(
            id=int(payload["id"]),
            type=TransactionType.from_str(str(payload["type"])),
            category=Category.from_str(str(payload["category"])),
            amount=float(payload["amount"]),
            description=str(payload["description"]),
            date=_parse_timestamp(payload["date"]),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: object) -> datetime:
    """Parse ISO strings (including a trailing ``Z``) into aware datetimes."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_amount(value: object) -> float:
    """Return ``value`` as a positive, finite float or raise InvalidAmountError."""

    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(value)
    try:
        amount = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as error:
        raise InvalidAmountError(value) from error
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError(value)
    return amount


def _clean_description(description: object) -> str:
    text = str(description).strip() if description is not None else ""
    if not text:
        raise EmptyDescriptionError()
    return text


class LedgerEngine:
    """Hold one user's transactions and enforce the budget allocation rule."""

    FIXED_PERCENTAGE = 0.50
    VARIABLE_PERCENTAGE = 0.30
    SAVINGS_PERCENTAGE = 0.20

    def __init__(
        self,
        identity: Optional[IdentityProvider] = None,
        store: Optional[KeyValueStore] = None,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Optional[Callable[[], datetime]] = None,
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> None:
        self._identity = identity
        self._store = store
        self._key_prefix = key_prefix
        self._clock = clock or _utc_now
        self._transactions: List[Transaction] = []
        self._sequence = 0
        for transaction in transactions or ():
            self._register(transaction)
        LOGGER.debug("Ledger initialised with %s transactions", len(self._transactions))

    # ------------------------------------------------------------------
    # Totals and budgets
    # ------------------------------------------------------------------
    def _sum(self, category: Category) -> float:
        return math.fsum(
            transaction.amount
            for transaction in self._transactions
            if transaction.category is category
        )

    @property
    def total_income(self) -> float:
        return self._sum(Category.INCOME)

    @property
    def fixed_expenses(self) -> float:
        return self._sum(Category.FIXED)

    @property
    def variable_expenses(self) -> float:
        return self._sum(Category.VARIABLE)

    @property
    def fixed_budget(self) -> float:
        return self.total_income * self.FIXED_PERCENTAGE

    @property
    def variable_budget(self) -> float:
        return self.total_income * self.VARIABLE_PERCENTAGE

    @property
    def savings_budget(self) -> float:
        return self.total_income * self.SAVINGS_PERCENTAGE

    def available_budget(self, category: Union[str, Category]) -> float:
        """Return what is left in the fixed or variable bucket (may be negative)."""

        bucket = Category.from_str(category)
        if bucket is Category.FIXED:
            return self.fixed_budget - self.fixed_expenses
        if bucket is Category.VARIABLE:
            return self.variable_budget - self.variable_expenses
        raise InvalidCategoryError("Only fixed and variable categories have a budget")

    def summary(self) -> Dict[str, float]:
        """Budgets, spending and remaining amounts for dashboard cards."""

        return {
            "total_income": self.total_income,
            "fixed_budget": self.fixed_budget,
            "fixed_expenses": self.fixed_expenses,
            "fixed_remaining": self.available_budget(Category.FIXED),
            "variable_budget": self.variable_budget,
            "variable_expenses": self.variable_expenses,
            "variable_remaining": self.available_budget(Category.VARIABLE),
            "savings_budget": self.savings_budget,
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _next_id(self) -> int:
        self._sequence += 1
        return self._sequence

    def _register(self, transaction: Transaction) -> None:
        """Append a transaction ensuring identifiers remain unique."""

        if any(existing.id == transaction.id for existing in self._transactions):
            raise ValueError(f"Transaction {transaction.id} already exists.")
        self._transactions.append(transaction)
        self._sequence = max(self._sequence, transaction.id)

    def add_transaction(
        self,
        kind: Union[str, TransactionType],
        category: Union[str, Category, None],
        amount: object,
        description: object,
    ) -> Transaction:
        """Validate and record a transaction, returning the stored record."""

        transaction_type = TransactionType.from_str(kind)
        if transaction_type is TransactionType.INCOME:
            bucket = Category.INCOME if category is None else Category.from_str(category)
            if bucket is not Category.INCOME:
                raise InvalidCategoryError("Income must be booked in the income category")
        else:
            if category is None:
                raise InvalidCategoryError("Expenses need a fixed or variable category")
            bucket = Category.from_str(category)
            if bucket not in EXPENSE_CATEGORIES:
                raise InvalidCategoryError("Expenses need a fixed or variable category")

        value = parse_amount(amount)
        text = _clean_description(description)

        if transaction_type is TransactionType.EXPENSE:
            available = self.available_budget(bucket)
            if value > available:
                LOGGER.info(
                    "Rejected %s expense of %.2f; only %.2f available",
                    bucket.value,
                    value,
                    available,
                )
                raise InsufficientBudgetError(bucket.value, value, available)

        transaction = Transaction(
            id=self._next_id(),
            type=transaction_type,
            category=bucket,
            amount=value,
            description=text,
            date=self._clock(),
        )
        self._transactions.append(transaction)
        LOGGER.info(
            "Recorded %s transaction %s (%s, %.2f)",
            transaction_type.value,
            transaction.id,
            bucket.value,
            value,
        )
        return transaction

    def add_income(self, amount: object, description: object) -> Transaction:
        return self.add_transaction(TransactionType.INCOME, Category.INCOME, amount, description)

    def add_expense(
        self, category: Union[str, Category], amount: object, description: object
    ) -> Transaction:
        return self.add_transaction(TransactionType.EXPENSE, category, amount, description)

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Retrieve a transaction, raising TransactionNotFoundError when missing."""

        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        raise TransactionNotFoundError(transaction_id)

    def delete_transaction(self, transaction_id: int) -> Transaction:
        """Remove a transaction, leaving the order of the others untouched."""

        transaction = self.get_transaction(transaction_id)
        self._transactions = [
            existing for existing in self._transactions if existing.id != transaction_id
        ]
        LOGGER.info("Deleted transaction %s", transaction_id)
        return transaction

    def clear_all(self) -> None:
        """Drop every transaction. There is no archive to restore from."""

        count = len(self._transactions)
        # The id counter keeps running so stale ids cannot match new entries.
        self._transactions = []
        LOGGER.info("Cleared ledger (%s transactions removed)", count)

    def _reset(self) -> None:
        self._transactions = []
        self._sequence = 0

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    @property
    def transactions(self) -> List[Transaction]:
        """Transactions in insertion order (a copy)."""

        return list(self._transactions)

    def list_transactions(
        self, category_filter: Union[str, Category] = FILTER_ALL
    ) -> List[Transaction]:
        """Return transactions newest first, optionally restricted to one category."""

        selected = str(getattr(category_filter, "value", category_filter)).strip().lower()
        if selected not in LIST_FILTERS:
            raise InvalidFilterError(f"Unsupported transaction filter: {category_filter}")
        if selected == FILTER_ALL:
            candidates = list(self._transactions)
        else:
            candidates = [
                transaction
                for transaction in self._transactions
                if transaction.category.value == selected
            ]
        # sorted() keeps insertion order for equal dates even with reverse=True.
        return sorted(candidates, key=lambda transaction: transaction.date, reverse=True)

    def export_snapshot(self) -> Dict[str, object]:
        """Export the ledger and its budget summary for download."""

        return {
            "transactions": [transaction.as_dict() for transaction in self._transactions],
            "summary": {
                "totalIncome": self.total_income,
                "fixedExpenses": self.fixed_expenses,
                "variableExpenses": self.variable_expenses,
                "fixedBudget": self.fixed_budget,
                "variableBudget": self.variable_budget,
                "savingsBudget": self.savings_budget,
                "exportDate": self._clock().isoformat(),
            },
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_state(self) -> Dict[str, object]:
        """Serialise the ledger into the stored state shape."""

        return {
            "transactions": [transaction.as_dict() for transaction in self._transactions],
            "totalIncome": self.total_income,
            "fixedExpenses": self.fixed_expenses,
            "variableExpenses": self.variable_expenses,
            "lastId": self._sequence,
        }

    def from_state(self, state: Dict[str, object]) -> None:
        """Replace the ledger contents with a previously stored state."""

        self._reset()
        try:
            for entry in state.get("transactions") or []:
                self._register(Transaction.from_dict(entry))
        except (KeyError, TypeError, ValueError, AttributeError) as error:
            self._reset()
            raise PersistenceError(f"Stored ledger is malformed: {error}") from error

        try:
            self._sequence = max(self._sequence, int(state.get("lastId") or 0))
        except (TypeError, ValueError):
            LOGGER.warning("Ignoring unreadable lastId %r", state.get("lastId"))

        for key, derived in (
            ("totalIncome", self.total_income),
            ("fixedExpenses", self.fixed_expenses),
            ("variableExpenses", self.variable_expenses),
        ):
            stored = state.get(key)
            if stored is None:
                continue
            try:
                matches = math.isclose(float(stored), derived, abs_tol=1e-9)
            except (TypeError, ValueError):
                matches = False
            if not matches:
                LOGGER.warning(
                    "Stored %s=%s disagrees with transactions (%s); using transactions",
                    key,
                    stored,
                    derived,
                )

    def storage_key(self) -> Optional[str]:
        """Namespaced key for the current user, or None when signed out."""

        user = self._identity.current_user_identity() if self._identity else None
        if not user:
            return None
        return f"{self._key_prefix}:{user}"

    def load(self) -> bool:
        """Load the current user's ledger; returns False for an empty ledger."""

        key = self.storage_key()
        if key is None or self._store is None:
            self._reset()
            return False
        try:
            state = self._store.get(key)
        except StoreError as error:
            self._reset()
            raise PersistenceError(f"Could not read ledger {key}") from error
        if state is None:
            self._reset()
            LOGGER.debug("No stored ledger for %s", key)
            return False
        self.from_state(state)
        LOGGER.info("Loaded %s transactions for %s", len(self._transactions), key)
        return True

    def save(self) -> bool:
        """Write the ledger for the current user; no-op while signed out."""

        key = self.storage_key()
        if key is None or self._store is None:
            return False
        try:
            self._store.set(key, self.to_state())
        except StoreError as error:
            raise PersistenceError(f"Could not write ledger {key}") from error
        LOGGER.debug("Saved %s transactions to %s", len(self._transactions), key)
        return True
