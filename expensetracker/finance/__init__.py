"""Mini README: Budgeting core for the expense tracker.

This package holds the transaction ledger and the budget-allocation rules:
income is split into fixed (50%), variable (30%) and savings (20%) buckets,
and expenses are only accepted while their bucket has room. The engine is
in-memory and delegates persistence to an injected key-value store keyed by
the signed-in user.
"""

from .errors import (
    AuthenticationRequiredError,
    EmptyDescriptionError,
    InsufficientBudgetError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidFilterError,
    LedgerError,
    PersistenceError,
    TransactionNotFoundError,
)
from .ledger import (
    LIST_FILTERS,
    Category,
    LedgerEngine,
    Transaction,
    TransactionType,
)

__all__ = [
    "AuthenticationRequiredError",
    "Category",
    "EmptyDescriptionError",
    "InsufficientBudgetError",
    "InvalidAmountError",
    "InvalidCategoryError",
    "InvalidFilterError",
    "LIST_FILTERS",
    "LedgerEngine",
    "LedgerError",
    "PersistenceError",
    "Transaction",
    "TransactionNotFoundError",
    "TransactionType",
]
