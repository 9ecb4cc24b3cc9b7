"""Loan store HTTP client for loan records and repayments"""

import httpx
from typing import Any, Dict, List
from copra_credit.domain.models import Loan, LoanAction, LoanPayment, LoanRequest, LoanStatus
from copra_credit.domain.exceptions import LoanStoreError
from copra_credit.infrastructure.clients.session import ApiSession
from copra_credit.infrastructure.clients.transactions import reference_id
from copra_credit.utils.date_utils import parse_timestamp
from copra_credit.config import settings


def parse_loan(doc: Dict[str, Any]) -> Loan:
    return Loan(
        loan_id=str(doc.get("_id") or doc["loan_id"]),
        supplier_id=reference_id(doc.get("supplier") or doc["supplier_id"]),
        amount=float(doc["amount"]),
        status=LoanStatus(doc["status"]),
        due_date=parse_timestamp(doc.get("due_date")),
        created_at=parse_timestamp(doc.get("createdAt")),
        interest_rate=float(doc.get("interest_rate") or 0),
        total_paid=float(doc.get("total_paid") or 0),
        total_amount_with_interest=(
            float(doc["total_amount_with_interest"]) if doc.get("total_amount_with_interest") else None
        ),
    )


def parse_payment(doc: Dict[str, Any], loan_id: str) -> LoanPayment:
    return LoanPayment(
        loan_id=reference_id(doc.get("loan") or loan_id),
        amount=float(doc["amount"]),
        payment_method=doc["payment_method"],
        reference_number=doc.get("reference_number"),
        notes=doc.get("notes"),
        payment_id=str(doc["_id"]) if doc.get("_id") else None,
        payment_date=parse_timestamp(doc.get("payment_date") or doc.get("createdAt")),
    )


class LoanStoreClient:
    """Client for the remote loan store"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.loan_store_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _request(self, session: ApiSession, method: str, path: str, **kwargs) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=session.headers(),
                    **kwargs,
                )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise LoanStoreError(f"Loan store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise LoanStoreError(f"Loan store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise LoanStoreError(f"Loan store unreachable: {e}") from e

    async def get_supplier_loans(self, session: ApiSession, supplier_id: str) -> List[Loan]:
        """
        Fetch every loan of a supplier.

        Raises:
            LoanStoreError: On timeout, HTTP errors, or invalid response
        """
        data = await self._request(session, "GET", "/loans", params={"supplier": supplier_id})
        records = data if isinstance(data, list) else data.get("loans", [])
        try:
            return [parse_loan(doc) for doc in records]
        except (KeyError, ValueError, TypeError) as e:
            raise LoanStoreError(f"Invalid loan data from store: {e}") from e

    async def create_loan(self, session: ApiSession, loan_request: LoanRequest) -> Dict[str, Any]:
        """Submit a loan request; the store creates it as pending"""
        data = await self._request(
            session,
            "POST",
            "/loans",
            json={
                "supplier_id": loan_request.supplier_id,
                "amount": loan_request.amount,
                "purpose": loan_request.purpose,
                "payment_percent": loan_request.payment_percent,
                "due_date": loan_request.due_date.isoformat(),
            },
        )
        return data.get("loan", data)

    async def record_payment(self, session: ApiSession, payment: LoanPayment) -> None:
        await self._request(
            session,
            "POST",
            f"/loans/{payment.loan_id}/payments",
            json={
                "amount": payment.amount,
                "payment_method": payment.payment_method,
                "reference_number": payment.reference_number,
                "notes": payment.notes,
            },
        )

    async def get_loan(self, session: ApiSession, loan_id: str) -> Loan:
        """
        Fetch a single loan.

        Raises:
            LoanStoreError: On timeout, HTTP errors (including 404), or invalid response
        """
        data = await self._request(session, "GET", f"/loans/{loan_id}")
        try:
            return parse_loan(data.get("loan", data))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise LoanStoreError(f"Invalid loan data from store: {e}") from e

    async def _apply_action(self, session: ApiSession, loan_id: str, action: LoanAction, **kwargs) -> Dict[str, Any]:
        data = await self._request(session, "PATCH", f"/loans/{loan_id}/{action.value}", **kwargs)
        return data.get("loan", data)

    async def approve_loan(self, session: ApiSession, loan_id: str) -> Dict[str, Any]:
        return await self._apply_action(session, loan_id, LoanAction.APPROVE)

    async def reject_loan(self, session: ApiSession, loan_id: str) -> Dict[str, Any]:
        return await self._apply_action(session, loan_id, LoanAction.REJECT)

    async def cancel_loan(self, session: ApiSession, loan_id: str) -> Dict[str, Any]:
        return await self._apply_action(session, loan_id, LoanAction.CANCEL)

    async def void_loan(self, session: ApiSession, loan_id: str, reason: str | None = None) -> Dict[str, Any]:
        return await self._apply_action(session, loan_id, LoanAction.VOID, json={"reason": reason})

    async def get_loan_payments(self, session: ApiSession, loan_id: str) -> List[LoanPayment]:
        """
        Fetch the payment history of a loan, auto-debit and manual alike.

        Raises:
            LoanStoreError: On timeout, HTTP errors, or invalid response
        """
        data = await self._request(session, "GET", f"/loans/{loan_id}/payments")
        records = data if isinstance(data, list) else data.get("payments", [])
        try:
            return [parse_payment(doc, loan_id) for doc in records]
        except (KeyError, ValueError, TypeError) as e:
            raise LoanStoreError(f"Invalid payment data from store: {e}") from e
