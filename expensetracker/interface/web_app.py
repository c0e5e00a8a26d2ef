"""Mini README: FastAPI-powered budget dashboard.

Structure:
    * create_application - application factory wiring routes and templates.
    * _http_error - maps ledger errors onto HTTP status codes.

The dashboard page renders the budget cards and the transaction list; the
``/api`` routes accept form posts from the page's script and return JSON.
One tracker instance serves the process, keyed to whoever signed in last.

Handlers are ``async def`` on purpose: they run one at a time on the event
loop, so the tracker has a single writer and needs no lock. The price is that
``JsonFileStore`` reads and writes block the loop while they run; ledgers are
small single-user files, so that pause is short. Moving handlers to plain
``def`` would put them on the threadpool and require a lock around the tracker.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from ..configuration import ExpenseTrackerSettings, get_settings
from ..finance import (
    AuthenticationRequiredError,
    InsufficientBudgetError,
    LedgerError,
    Transaction,
    TransactionNotFoundError,
)
from ..logging_utils import configure_root_logger, get_logger, level_for_environment
from ..services import KeyValueStore, Severity
from ..tracker import ExpenseTracker, build_tracker

LOGGER = get_logger(__name__)

CATEGORY_LABELS = {
    "income": "Income",
    "fixed": "Fixed expense",
    "variable": "Variable expense",
}


def _transaction_payload(transaction: Transaction) -> Dict[str, object]:
    payload = transaction.as_dict()
    payload["label"] = CATEGORY_LABELS[transaction.category.value]
    return payload


def _http_error(error: LedgerError) -> HTTPException:
    """Translate a ledger error into an HTTPException."""

    if isinstance(error, AuthenticationRequiredError):
        return HTTPException(status_code=401, detail=error.message)
    if isinstance(error, TransactionNotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, InsufficientBudgetError):
        return HTTPException(
            status_code=409,
            detail={
                "message": error.message,
                "category": error.category,
                "available": error.available,
            },
        )
    return HTTPException(status_code=400, detail=error.message)


def create_application(
    settings: Optional[ExpenseTrackerSettings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    tracker: Optional[ExpenseTracker] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    configure_root_logger(level_for_environment(settings.environment))

    tracker = tracker or build_tracker(settings, store=store)
    tracker.start()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        tracker.analytics.flush()

    app = FastAPI(title="Expense Tracker", version="1.0.0", lifespan=lifespan)
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    static_directory = Path(__file__).parent / "static"
    app.mount("/static", StaticFiles(directory=str(static_directory)), name="static")

    app.state.tracker = tracker

    def _state_payload() -> Dict[str, object]:
        return {
            "user": tracker.current_user,
            "filter": tracker.current_filter,
            "summary": tracker.engine.summary(),
            "transactions": [
                _transaction_payload(transaction) for transaction in tracker.list_transactions()
            ],
        }

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request) -> HTMLResponse:
        """Render the budget cards and the transaction list."""

        state = _state_payload()
        LOGGER.debug(
            "Rendering dashboard for %s with %s transactions",
            state["user"],
            len(state["transactions"]),
        )
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "state": state,
                "currency": settings.currency_symbol,
                "filters": ["all", "income", "fixed", "variable"],
                "labels": CATEGORY_LABELS,
                "notifications": [item.as_dict() for item in tracker.notifier.recent()],
            },
        )

    @app.get("/api/summary")
    async def summary() -> JSONResponse:
        return JSONResponse(_state_payload())

    @app.get("/api/transactions")
    async def list_transactions(
        category_filter: str = Query("all", alias="filter"),
    ) -> JSONResponse:
        """Return transactions newest first for the requested filter."""

        try:
            transactions = tracker.change_filter(category_filter)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse(
            {
                "filter": tracker.current_filter,
                "transactions": [_transaction_payload(item) for item in transactions],
            }
        )

    @app.post("/api/income")
    async def add_income(
        amount: str = Form(""),
        description: str = Form(""),
    ) -> JSONResponse:
        try:
            transaction = tracker.add_income(amount, description)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse(
            {"transaction": _transaction_payload(transaction), **_state_payload()},
            status_code=201,
        )

    @app.post("/api/expenses")
    async def add_expense(
        category: str = Form(...),
        amount: str = Form(""),
        description: str = Form(""),
    ) -> JSONResponse:
        try:
            transaction = tracker.add_expense(category, amount, description)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse(
            {"transaction": _transaction_payload(transaction), **_state_payload()},
            status_code=201,
        )

    @app.delete("/api/transactions/{transaction_id}")
    async def delete_transaction(transaction_id: int) -> JSONResponse:
        try:
            transaction = tracker.delete_transaction(transaction_id)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"deleted": _transaction_payload(transaction), **_state_payload()})

    @app.post("/api/new-month")
    async def new_month() -> JSONResponse:
        tracker.new_month()
        return JSONResponse(_state_payload())

    @app.get("/api/export")
    async def export_data() -> JSONResponse:
        """Serve the ledger snapshot as a downloadable JSON file."""

        try:
            bundle = tracker.export_data()
        except LedgerError as error:
            raise _http_error(error) from error
        LOGGER.info("Exporting %s transactions", len(bundle.snapshot["transactions"]))
        return JSONResponse(
            bundle.snapshot,
            headers={"Content-Disposition": f'attachment; filename="{bundle.filename}"'},
        )

    @app.get("/api/notifications")
    async def notifications() -> JSONResponse:
        recent = tracker.notifier.recent()
        return JSONResponse({"notifications": [item.as_dict() for item in recent]})

    @app.post("/api/session/login")
    async def login(username: str = Form("")) -> JSONResponse:
        try:
            tracker.identity.sign_in(username)
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        tracker.notifier.notify("Signed in", Severity.SUCCESS)
        return JSONResponse(_state_payload())

    @app.post("/api/session/logout")
    async def logout() -> JSONResponse:
        tracker.identity.sign_out()
        tracker.notifier.notify("Signed out", Severity.SUCCESS)
        return JSONResponse(_state_payload())

    return app
