"""Transaction store HTTP client for fetching and recording supplier purchases"""

import httpx
from typing import Any, Dict, List
from copra_credit.domain.models import Transaction, TransactionStatus
from copra_credit.domain.exceptions import TransactionStoreError
from copra_credit.infrastructure.clients.session import ApiSession
from copra_credit.utils.date_utils import parse_timestamp
from copra_credit.config import settings


def reference_id(value: Any) -> str:
    """Store references come either as a bare id or as an embedded document"""
    if isinstance(value, dict):
        return str(value["_id"])
    return str(value)


def parse_transaction(txn: Dict[str, Any]) -> Transaction:
    """Map a store document onto the domain model (net kilos preferred over gross quantity)"""
    timestamp = parse_timestamp(txn.get("transaction_date") or txn.get("date") or txn.get("createdAt"))
    if timestamp is None:
        raise ValueError(f"transaction {txn.get('_id')} has no date")

    return Transaction(
        transaction_id=str(txn.get("_id") or txn["transaction_id"]),
        supplier_id=reference_id(txn["supplier"]),
        date=timestamp,
        quantity=float(txn.get("total_kilo") or txn["quantity"]),
        total_amount=float(txn.get("total_amount") or txn.get("total_price") or 0),
        status=TransactionStatus(txn["status"]),
    )


class TransactionStoreClient:
    """Client for the remote transaction store"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.transaction_store_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_completed_transactions(self, session: ApiSession, supplier_id: str) -> List[Transaction]:
        """
        Fetch a supplier's completed transactions.

        Raises:
            TransactionStoreError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/transactions",
                    params={"supplier": supplier_id, "status": TransactionStatus.COMPLETED.value},
                    headers=session.headers(),
                )
                response.raise_for_status()
                data = response.json()

                records = data if isinstance(data, list) else data.get("transactions", [])
                return [parse_transaction(txn) for txn in records]

            except httpx.TimeoutException as e:
                raise TransactionStoreError(f"Transaction store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransactionStoreError(f"Transaction store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransactionStoreError(f"Transaction store unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise TransactionStoreError(f"Invalid transaction data from store: {e}") from e

    async def record_transaction(self, session: ApiSession, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a transaction record and return the stored document.

        Raises:
            TransactionStoreError: On timeout or HTTP errors
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/transactions",
                    json=payload,
                    headers=session.headers(),
                )
                response.raise_for_status()
                data = response.json()
                return data.get("transaction", data)

            except httpx.TimeoutException as e:
                raise TransactionStoreError(f"Transaction store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransactionStoreError(f"Transaction store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransactionStoreError(f"Transaction store unreachable: {e}") from e
