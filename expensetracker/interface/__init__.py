"""Mini README: Browser-facing interface for the expense tracker.

Exports the FastAPI application factory serving the dashboard page and the
JSON API behind it.
"""

from .web_app import create_application

__all__ = ["create_application"]
