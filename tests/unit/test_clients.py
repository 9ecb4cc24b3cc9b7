"""Unit tests for the remote store clients"""

import json
import httpx
import pytest
from datetime import datetime, timezone
from copra_credit.domain.models import LoanPayment, LoanRequest, LoanStatus, TransactionStatus
from copra_credit.utils.date_utils import parse_timestamp
from copra_credit.domain.exceptions import LoanStoreError, TransactionStoreError
from copra_credit.infrastructure.clients.session import ApiSession
from copra_credit.infrastructure.clients.transactions import TransactionStoreClient
from copra_credit.infrastructure.clients.loans import LoanStoreClient

BASE = "http://store.test/api"
SESSION = ApiSession(token="tok", role="supplier", user_id="user_1")


def transport_returning(status_code: int, body, seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


def test_session_headers():
    assert SESSION.headers() == {"Authorization": "Bearer tok"}
    assert ApiSession().headers() == {}


async def test_get_completed_transactions_parses_store_documents():
    seen = []
    body = {
        "transactions": [
            {
                "_id": "t1",
                "supplier": {"_id": "s1", "name": "Juan"},
                "quantity": 1000,
                "less_kilo": 50,
                "total_kilo": 950,
                "total_amount": 38000,
                "status": "completed",
                "createdAt": "2024-02-01T03:00:00.000Z",
            },
            {
                "_id": "t2",
                "supplier": "s1",
                "quantity": 400,
                "total_price": 16000,
                "status": "completed",
                "transaction_date": "2024-02-10T00:00:00+00:00",
            },
        ]
    }
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(200, body, seen))

    transactions = await client.get_completed_transactions(SESSION, "s1")

    assert [t.transaction_id for t in transactions] == ["t1", "t2"]
    assert transactions[0].supplier_id == "s1"
    assert transactions[0].quantity == 950  # net kilos preferred
    assert transactions[1].quantity == 400
    assert transactions[1].total_amount == 16000
    assert transactions[0].status == TransactionStatus.COMPLETED
    assert transactions[0].date == datetime(2024, 2, 1, 3, 0, tzinfo=timezone.utc)

    request = seen[0]
    assert request.url.params["supplier"] == "s1"
    assert request.url.params["status"] == "completed"
    assert request.headers["Authorization"] == "Bearer tok"


async def test_get_completed_transactions_accepts_bare_list():
    body = [{"_id": "t1", "supplier": "s1", "quantity": 10, "status": "completed", "date": "2024-01-01"}]
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(200, body))

    transactions = await client.get_completed_transactions(SESSION, "s1")

    assert len(transactions) == 1


async def test_get_completed_transactions_http_error():
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(500, {"message": "boom"}))

    with pytest.raises(TransactionStoreError, match="500"):
        await client.get_completed_transactions(SESSION, "s1")


async def test_get_completed_transactions_malformed_payload():
    body = {"transactions": [{"_id": "t1", "supplier": "s1", "status": "completed"}]}
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(200, body))

    with pytest.raises(TransactionStoreError, match="Invalid transaction data"):
        await client.get_completed_transactions(SESSION, "s1")


async def test_get_completed_transactions_unknown_status():
    body = [{"_id": "t1", "supplier": "s1", "quantity": 5, "status": "archived", "date": "2024-01-01"}]
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(200, body))

    with pytest.raises(TransactionStoreError):
        await client.get_completed_transactions(SESSION, "s1")


async def test_get_completed_transactions_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = TransactionStoreClient(base_url=BASE, timeout=0.1, transport=httpx.MockTransport(handler))

    with pytest.raises(TransactionStoreError, match="timeout"):
        await client.get_completed_transactions(SESSION, "s1")


async def test_record_transaction_returns_stored_document():
    seen = []
    body = {"transaction": {"_id": "t9", "status": "completed"}}
    client = TransactionStoreClient(base_url=BASE, transport=transport_returning(201, body, seen))

    stored = await client.record_transaction(SESSION, {"supplier": "s1", "quantity": 10})

    assert stored["_id"] == "t9"
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"supplier": "s1", "quantity": 10}


async def test_get_supplier_loans_parses_loans():
    body = {
        "loans": [
            {
                "_id": "l1",
                "supplier": {"_id": "s1"},
                "amount": 1000,
                "status": "approved",
                "interest_rate": 5,
                "total_paid": 200,
                "total_amount_with_interest": 1050,
                "due_date": "2024-04-15T00:00:00.000Z",
                "createdAt": "2024-03-01T00:00:00.000Z",
            },
            {"_id": "l2", "supplier_id": "s1", "amount": 300, "status": "pending"},
        ]
    }
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, body))

    loans = await client.get_supplier_loans(SESSION, "s1")

    assert loans[0].loan_id == "l1"
    assert loans[0].status == LoanStatus.APPROVED
    assert loans[0].total_due == 1050
    assert loans[0].due_date == datetime(2024, 4, 15, tzinfo=timezone.utc)
    assert loans[1].supplier_id == "s1"
    assert loans[1].total_due == 300
    assert loans[1].due_date is None


async def test_get_supplier_loans_http_error():
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(503, {}))

    with pytest.raises(LoanStoreError, match="503"):
        await client.get_supplier_loans(SESSION, "s1")


async def test_create_loan_sends_policy_fields():
    seen = []
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(201, {"loan": {"_id": "l5"}}, seen))
    loan_request = LoanRequest(
        supplier_id="s1",
        amount=60,
        requested_amount=500,
        purpose="Farm inputs",
        payment_percent=100,
        due_date=datetime(2024, 4, 15, tzinfo=timezone.utc),
    )

    created = await client.create_loan(SESSION, loan_request)

    assert created == {"_id": "l5"}
    sent = json.loads(seen[0].content)
    assert sent == {
        "supplier_id": "s1",
        "amount": 60,
        "purpose": "Farm inputs",
        "payment_percent": 100,
        "due_date": "2024-04-15T00:00:00+00:00",
    }


async def test_record_payment_posts_to_loan():
    seen = []
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(201, {"payment": {}}, seen))

    await client.record_payment(SESSION, LoanPayment(loan_id="l1", amount=250, payment_method="auto-debit"))

    assert seen[0].url.path == "/api/loans/l1/payments"
    assert json.loads(seen[0].content)["payment_method"] == "auto-debit"


@pytest.mark.parametrize(
    "value",
    ["2026-12-01", "2026-12-01T00:00:00", "2026-12-01T00:00:00Z", "2026-12-01T00:00:00+00:00"],
)
def test_parse_timestamp_is_always_utc(value):
    assert parse_timestamp(value) == datetime(2026, 12, 1, tzinfo=timezone.utc)


def test_parse_timestamp_keeps_other_offsets():
    parsed = parse_timestamp("2026-12-01T08:00:00+08:00")

    assert parsed.utcoffset().total_seconds() == 8 * 3600
    assert parsed == datetime(2026, 12, 1, tzinfo=timezone.utc)


async def test_get_loan_unwraps_document():
    seen = []
    body = {"loan": {"_id": "l1", "supplier": "s1", "amount": 500, "status": "pending", "due_date": "2026-12-01"}}
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, body, seen))

    loan = await client.get_loan(SESSION, "l1")

    assert loan.loan_id == "l1"
    assert loan.status == LoanStatus.PENDING
    assert loan.due_date.tzinfo is not None
    assert seen[0].url.path == "/api/loans/l1"


async def test_get_loan_not_found():
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(404, {"message": "Loan not found"}))

    with pytest.raises(LoanStoreError, match="404"):
        await client.get_loan(SESSION, "missing")


@pytest.mark.parametrize(
    "method_name,action",
    [("approve_loan", "approve"), ("reject_loan", "reject"), ("cancel_loan", "cancel")],
)
async def test_loan_actions_patch_action_path(method_name, action):
    seen = []
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, {"loan": {"_id": "l1"}}, seen))

    updated = await getattr(client, method_name)(SESSION, "l1")

    assert updated == {"_id": "l1"}
    assert seen[0].method == "PATCH"
    assert seen[0].url.path == f"/api/loans/l1/{action}"


async def test_void_loan_sends_reason():
    seen = []
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, {"loan": {"_id": "l1"}}, seen))

    await client.void_loan(SESSION, "l1", reason="Duplicate request")

    assert seen[0].method == "PATCH"
    assert seen[0].url.path == "/api/loans/l1/void"
    assert json.loads(seen[0].content) == {"reason": "Duplicate request"}


async def test_loan_action_conflict_from_store():
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(400, {"message": "Loan is not pending"}))

    with pytest.raises(LoanStoreError, match="400"):
        await client.approve_loan(SESSION, "l1")


async def test_get_loan_payments_parses_history():
    body = {
        "payments": [
            {
                "_id": "p1",
                "loan": {"_id": "l1"},
                "amount": 250,
                "payment_method": "auto-debit",
                "reference_number": "t9",
                "payment_date": "2024-03-02T00:00:00.000Z",
            },
            {"_id": "p2", "amount": 100, "payment_method": "cash", "createdAt": "2024-03-05T10:00:00"},
        ]
    }
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, body))

    payments = await client.get_loan_payments(SESSION, "l1")

    assert [p.payment_id for p in payments] == ["p1", "p2"]
    assert payments[0].loan_id == "l1"
    assert payments[0].reference_number == "t9"
    assert payments[1].loan_id == "l1"
    assert payments[1].payment_method == "cash"
    assert payments[1].payment_date == datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)


async def test_get_loan_payments_malformed_payload():
    client = LoanStoreClient(base_url=BASE, transport=transport_returning(200, [{"_id": "p1", "amount": 10}]))

    with pytest.raises(LoanStoreError, match="Invalid payment data"):
        await client.get_loan_payments(SESSION, "l1")
