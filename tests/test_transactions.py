"""Tests for transaction endpoints."""

from decimal import Decimal
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from finance_tracker.services.auth import AuthService
from finance_tracker.services.jwt import get_jwt_service


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _create(client: TestClient, token: str, **overrides):
    body = {"type": "expense", "amount": 12.5, "purpose": "Lunch", "category": "food"}
    body.update(overrides)
    return client.post("/api/transactions", json=body, headers=_auth(token))


class TestCreateTransaction:
    """Tests for recording a transaction."""

    def test_create_success(self, client: TestClient, test_user: dict):
        response = _create(client, test_user["token"], date="2026-03-01")
        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "expense"
        assert Decimal(str(data["amount"])) == Decimal("12.50")
        assert data["purpose"] == "Lunch"
        assert data["category"] == "food"
        assert data["date"] == "2026-03-01"
        assert data["user_id"] == test_user["user_id"]

    def test_date_defaults_to_today(self, client: TestClient, test_user: dict):
        response = _create(client, test_user["token"])
        assert response.status_code == 201
        assert response.json()["date"]

    def test_create_with_session_cookie(self, client: TestClient, test_user: dict):
        client.post("/api/login", json={"username": "alice", "password": "pw1"})
        response = client.post(
            "/api/transactions",
            json={"type": "income", "amount": "2500.00", "purpose": "Salary", "category": "salary"},
        )
        assert response.status_code == 201

    def test_create_requires_auth(self, client: TestClient):
        response = client.post(
            "/api/transactions",
            json={"type": "expense", "amount": 5, "purpose": "Coffee", "category": "food"},
        )
        assert response.status_code == 401

    def test_missing_field(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/transactions",
            json={"type": "expense", "amount": 5, "category": "food"},
            headers=_auth(test_user["token"]),
        )
        assert response.status_code == 400

    def test_invalid_type(self, client: TestClient, test_user: dict):
        assert _create(client, test_user["token"], type="refund").status_code == 400

    def test_amount_must_be_positive(self, client: TestClient, test_user: dict):
        assert _create(client, test_user["token"], amount=0).status_code == 400
        assert _create(client, test_user["token"], amount=-3).status_code == 400

    def test_database_failure_is_generic_500(self, client: TestClient, test_user: dict):
        error = OperationalError("INSERT INTO transactions", {}, Exception("disk I/O error"))
        with patch("finance_tracker.services.transaction.TransactionService.create_transaction", side_effect=error):
            response = _create(client, test_user["token"])
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}


class TestListTransactions:
    """Tests for listing transactions."""

    def test_list_empty(self, client: TestClient, test_user: dict):
        response = client.get("/api/transactions", headers=_auth(test_user["token"]))
        assert response.status_code == 200
        assert response.json() == []

    def test_list_requires_auth(self, client: TestClient):
        assert client.get("/api/transactions").status_code == 401

    def test_ordered_by_date_then_id_descending(self, client: TestClient, test_user: dict):
        token = test_user["token"]
        ids = {}
        for purpose, date in [("b", "2026-01-05"), ("a", "2026-01-01"), ("c", "2026-01-05"), ("d", "2026-02-01")]:
            ids[purpose] = _create(client, token, purpose=purpose, date=date).json()["id"]

        response = client.get("/api/transactions", headers=_auth(token))
        purposes = [t["purpose"] for t in response.json()]
        assert purposes == ["d", "c", "b", "a"]
        assert ids["c"] > ids["b"]

    def test_only_own_transactions(self, client: TestClient, test_user: dict, db_session: Session):
        other = AuthService().register(db_session, "bob", "bob@mail.com", "+15559876543", "pw")
        other_token = get_jwt_service().create_token(user_id=other.user_id, username=other.username)

        _create(client, test_user["token"], purpose="mine")
        _create(client, other_token, purpose="theirs")

        mine = client.get("/api/transactions", headers=_auth(test_user["token"])).json()
        assert [t["purpose"] for t in mine] == ["mine"]
        assert all(t["user_id"] == test_user["user_id"] for t in mine)

        theirs = client.get("/api/transactions", headers=_auth(other_token)).json()
        assert [t["purpose"] for t in theirs] == ["theirs"]
