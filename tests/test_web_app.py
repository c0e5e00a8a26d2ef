"""Mini README: Tests for the FastAPI dashboard and JSON API.

Each test builds a fresh application backed by an in-memory store and drives
it through FastAPI's TestClient.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from expensetracker.interface import create_application


@pytest.fixture
def client(settings, store) -> TestClient:
    return TestClient(create_application(settings, store=store))


def _login(client: TestClient, username: str = "ana") -> None:
    response = client.post("/api/session/login", data={"username": username})
    assert response.status_code == 200
    assert response.json()["user"] == username


def test_dashboard_renders_for_guests(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "Guest" in response.text
    assert "No transactions to show" in response.text


def test_mutations_need_a_session(client) -> None:
    response = client.post("/api/income", data={"amount": "100", "description": "salary"})

    assert response.status_code == 401


def test_budget_flow_over_http(client, store) -> None:
    _login(client)

    income = client.post("/api/income", data={"amount": "1000", "description": "salary"})
    assert income.status_code == 201
    assert income.json()["summary"]["fixed_budget"] == pytest.approx(500.0)

    rent = client.post(
        "/api/expenses", data={"category": "fixed", "amount": "400", "description": "rent"}
    )
    assert rent.status_code == 201
    rent_id = rent.json()["transaction"]["id"]
    assert rent.json()["transaction"]["label"] == "Fixed expense"

    rejected = client.post(
        "/api/expenses", data={"category": "fixed", "amount": "150", "description": "insurance"}
    )
    assert rejected.status_code == 409
    assert rejected.json()["detail"]["available"] == pytest.approx(100.0)

    deleted = client.delete(f"/api/transactions/{rent_id}")
    assert deleted.status_code == 200
    assert deleted.json()["summary"]["fixed_remaining"] == pytest.approx(500.0)
    assert store.get("expenseTrackerData:ana")["fixedExpenses"] == pytest.approx(0.0)

    missing = client.delete(f"/api/transactions/{rent_id}")
    assert missing.status_code == 404


def test_validation_errors_map_to_bad_request(client) -> None:
    _login(client)

    assert client.post("/api/income", data={"amount": "abc", "description": "x"}).status_code == 400
    assert client.post("/api/income", data={"amount": "10", "description": " "}).status_code == 400
    assert client.get("/api/transactions", params={"filter": "savings"}).status_code == 400


def test_transactions_filter_and_notifications(client) -> None:
    _login(client)
    client.post("/api/income", data={"amount": "1000", "description": "salary"})
    client.post("/api/expenses", data={"category": "variable", "amount": "25", "description": "lunch"})

    response = client.get("/api/transactions", params={"filter": "variable"})

    assert response.status_code == 200
    assert response.json()["filter"] == "variable"
    assert [item["description"] for item in response.json()["transactions"]] == ["lunch"]
    notifications = client.get("/api/notifications").json()["notifications"]
    assert notifications[0]["message"] == "Expense added"


def test_export_is_served_as_attachment(client) -> None:
    assert client.get("/api/export").status_code == 401

    _login(client)
    client.post("/api/income", data={"amount": "1000", "description": "salary"})

    response = client.get("/api/export")

    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    assert "expenses-" in response.headers["content-disposition"]
    body = response.json()
    assert body["summary"]["variableBudget"] == pytest.approx(300.0)
    assert len(body["transactions"]) == 1


def test_new_month_and_logout(client) -> None:
    _login(client)
    client.post("/api/income", data={"amount": "1000", "description": "salary"})

    cleared = client.post("/api/new-month")
    assert cleared.json()["transactions"] == []

    logged_out = client.post("/api/session/logout")
    assert logged_out.json()["user"] is None
    assert client.post("/api/session/login", data={"username": ""}).status_code == 400
