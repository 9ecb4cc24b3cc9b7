"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List
from fastapi.testclient import TestClient
from copra_credit.api.main import create_app
from copra_credit.domain.models import Transaction, TransactionStatus


def make_transaction(
    quantity: float,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    day: int = 0,
    supplier_id: str = "supplier_1",
) -> Transaction:
    """Build a purchase; peso value follows a flat 40/kg price"""
    return Transaction(
        transaction_id=f"txn_{day}_{quantity}",
        supplier_id=supplier_id,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=day),
        quantity=quantity,
        total_amount=quantity * 40,
        status=status,
    )


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def transactions_factory() -> Callable[..., List[Transaction]]:
    """Build completed transactions from a list of quantities"""

    def build(quantities: List[float], status: TransactionStatus = TransactionStatus.COMPLETED) -> List[Transaction]:
        return [make_transaction(q, status=status, day=i) for i, q in enumerate(quantities)]

    return build


@pytest.fixture
def supplier_headers() -> dict:
    return {"Authorization": "Bearer supplier-token", "X-User-Role": "supplier", "X-User-Id": "user_1"}


@pytest.fixture
def owner_headers() -> dict:
    return {"Authorization": "Bearer owner-token", "X-User-Role": "owner", "X-User-Id": "owner_1"}
