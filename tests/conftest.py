"""Pytest configuration and fixtures."""

import copy
import os
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_SIGNING_KEY_JWK", "test-signing-key-jwk")
os.environ.setdefault("STAFF_ROLES", "admin,service_role")


OWNER_ID = "550e8400-e29b-41d4-a716-446655440000"
OTHER_USER_ID = "880e8400-e29b-41d4-a716-446655440000"


class _Result:
    def __init__(self, data: Any) -> None:
        self.data = data


class _Call:
    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    def execute(self) -> _Result:
        return _Result(self._fn())


class FakeQuery:
    """Just enough of the PostgREST query builder for the services under test."""

    def __init__(self, store: "FakeSupabase", table: str) -> None:
        self.store = store
        self.table = table
        self._payload: dict[str, Any] | None = None
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._single = False

    def insert(self, payload: dict[str, Any]) -> "FakeQuery":
        self._payload = payload
        return self

    def select(self, *_: Any) -> "FakeQuery":
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = True
        return self

    def execute(self) -> _Result | None:
        rows = self.store.tables.setdefault(self.table, [])

        if self._payload is not None:
            if self.store.transient_failures.get(self.table, 0) > 0:
                self.store.transient_failures[self.table] -= 1
                raise httpx.ConnectError(f"{self.table} connection reset")
            if self.table in self.store.failing_tables:
                raise RuntimeError(f"{self.table} insert failed")
            row = {
                "created_at": datetime.now(timezone.utc).isoformat(),
                **copy.deepcopy(self._payload),
                "id": self.store.next_id(self.table),
            }
            rows.append(row)
            return _Result([copy.deepcopy(row)])

        matched = [r for r in rows if all(r.get(col) == val for col, val in self._filters)]
        if self._order:
            column, desc = self._order
            matched.sort(key=lambda r: r[column], reverse=desc)
        if self._single:
            return _Result(copy.deepcopy(matched[0])) if matched else None
        return _Result(copy.deepcopy(matched))


class FakeSupabase:
    """In-memory stand-in for the Supabase client and the order RPC functions."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failing_tables: set[str] = set()
        self.transient_failures: dict[str, int] = {}
        # Mirrors order_number_seq, which starts at 5601.
        self.sequence = 5600
        self._ids: dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self._ids[table] = self._ids.get(table, 0) + 1
        return self._ids[table]

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, fn: str, params: dict[str, Any] | None = None) -> _Call:
        handler = getattr(self, f"_rpc_{fn}")
        return _Call(lambda: handler(**(params or {})))

    def _rpc_next_order_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    def _rpc_advance_order_status(
        self,
        p_order_id: int,
        p_status: str,
        p_entry: dict[str, Any],
        p_progress: int | None = None,
        p_updated_at: str | None = None,
        p_expected_status: str | None = None,
    ) -> list[dict[str, Any]]:
        for row in self.tables.get("orders", []):
            if row["id"] == p_order_id:
                if p_expected_status is not None and row["status"] != p_expected_status:
                    return []
                row["status"] = p_status
                row["status_timeline"] = (row.get("status_timeline") or []) + [copy.deepcopy(p_entry)]
                if p_progress is not None:
                    row["progress_percentage"] = p_progress
                row["updated_at"] = p_updated_at
                return [copy.deepcopy(row)]
        return []


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """Provide an empty in-memory order store."""
    return FakeSupabase()


@pytest.fixture
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()
    yield settings
    get_settings.cache_clear()


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def order_payload() -> dict[str, Any]:
    """A valid POST /orders body: 500 pieces split across five sizes."""
    return {
        "product_id": 3,
        "quantity": 500,
        "size_breakdown": {"S": 100, "M": 150, "L": 150, "XL": 75, "XXL": 25},
        "colors": {"Navy": 300, "White": 200},
        "customization": {"logo": "embroidered chest logo"},
        "delivery_date": "2026-12-15",
        "subtotal": "2000.00",
        "customization_fee": "500.00",
        "shipping_fee": "100.00",
        "tax": "260.00",
        "total_amount": "2860.00",
        "shipping_address": "12 Textile Park, Surat, Gujarat",
        "contact_name": "Priya Shah",
        "contact_phone": "+91 98765 43210",
        "notes": "Rush order for seasonal collection",
    }


@pytest.fixture
def order_row() -> dict[str, Any]:
    """A stored order as returned by the database."""
    return {
        "id": 42,
        "order_number": "DAS-2026-0042",
        "user_id": OWNER_ID,
        "product_id": 3,
        "quantity": 500,
        "size_breakdown": {"S": 100, "M": 150, "L": 150, "XL": 75, "XXL": 25},
        "colors": {"Navy": 300, "White": 200},
        "customization": {},
        "delivery_date": "2026-12-15",
        "status": "confirmed",
        "status_timeline": [
            {
                "status": "confirmed",
                "timestamp": "2026-10-02T09:00:00+00:00",
                "note": "Order status updated to confirmed",
            }
        ],
        "progress_percentage": 0,
        "subtotal": "2000.00",
        "customization_fee": "500.00",
        "shipping_fee": "100.00",
        "tax": "260.00",
        "total_amount": "2860.00",
        "shipping_address": "12 Textile Park, Surat, Gujarat",
        "contact_name": "Priya Shah",
        "contact_phone": "+91 98765 43210",
        "notes": None,
        "created_at": "2026-10-01T10:00:00+00:00",
        "updated_at": "2026-10-02T09:00:00+00:00",
    }
