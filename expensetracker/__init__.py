"""Mini README: Core package initializer for the expense tracker.

This module exposes convenience imports so the web interface, the CLI and
tests can reach logging helpers without knowing the exact module structure.
The budgeting engine itself lives in :mod:`expensetracker.finance` and its
collaborators (storage, identity, analytics) in :mod:`expensetracker.services`.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
