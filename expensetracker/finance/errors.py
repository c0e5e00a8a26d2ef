"""Mini README: Exception hierarchy raised by the ledger engine.

Every validation failure derives from :class:`LedgerError` (a ``ValueError``)
and carries a ``message`` suitable for showing to the user. Missing
transactions additionally subclass ``KeyError`` so callers that already catch
lookup failures keep working.
"""

from __future__ import annotations

from typing import Optional


class LedgerError(ValueError):
    """Base class for ledger validation failures."""

    default_message = "The ledger rejected the operation"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InvalidAmountError(LedgerError):
    """Raised when an amount is unparseable, non-finite, or not positive."""

    default_message = "Please enter a valid amount"

    def __init__(self, value: object = None) -> None:
        self.value = value
        super().__init__()


class EmptyDescriptionError(LedgerError):
    """Raised when the description is blank after trimming."""

    default_message = "Please enter a description"


class InvalidCategoryError(LedgerError):
    """Raised for unknown transaction kinds or mismatched categories."""

    default_message = "Unsupported transaction type or category"


class InvalidFilterError(LedgerError):
    """Raised when a listing filter is not ``all`` or a known category."""

    default_message = "Unsupported transaction filter"


class InsufficientBudgetError(LedgerError):
    """Raised when an expense exceeds what is left in its bucket."""

    def __init__(self, category: str, amount: float, available: float) -> None:
        self.category = category
        self.amount = amount
        self.available = available
        super().__init__(f"Not enough budget. Available: {available:.2f}")


class TransactionNotFoundError(LedgerError, KeyError):
    """Raised when deleting or fetching an id that is not in the ledger."""

    def __init__(self, transaction_id: object) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class AuthenticationRequiredError(LedgerError):
    """Raised by the host when a mutation is attempted while signed out."""

    default_message = "You must sign in to manage your expenses"


class PersistenceError(RuntimeError):
    """Raised when the ledger cannot be read from or written to its store."""
