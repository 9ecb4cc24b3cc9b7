"""POST /v1/transactions - record a copra purchase and auto-debit outstanding loans"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from copra_credit.api.v1.schemas import AutoDebitPaymentSchema, TransactionCreateRequest, TransactionCreateResponse
from copra_credit.api.dependencies import get_loan_store, get_request_id, get_transaction_store, require_role
from copra_credit.infrastructure.clients.session import ApiSession, ADMIN, OWNER
from copra_credit.infrastructure.clients.transactions import TransactionStoreClient
from copra_credit.infrastructure.clients.loans import LoanStoreClient
from copra_credit.domain.transactions import calculate_transaction_totals
from copra_credit.domain.loans import allocate_auto_debit
from copra_credit.domain.models import TransactionStatus
from copra_credit.domain.exceptions import LoanStoreError, TransactionStoreError
from copra_credit.infrastructure.observability.metrics import auto_debit_payment_counter, store_fetch_failures_counter

router = APIRouter()


@router.post("/transactions", response_model=TransactionCreateResponse)
async def record_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    session: ApiSession = Depends(require_role(ADMIN, OWNER)),
    transaction_store: TransactionStoreClient = Depends(get_transaction_store),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """
    Record a completed purchase from a supplier.

    Flow:
    1. Compute net kilos and total price
    2. Store the transaction as completed
    3. Apply the proceeds to the supplier's approved loans (auto-debit)

    A loan store failure in step 3 does not undo the recorded transaction;
    the response reports `auto_debit_complete: false` instead.
    """
    request_id = get_request_id(request)
    totals = calculate_transaction_totals(
        request_body.quantity, request_body.less_kilo, request_body.unit_price
    )

    try:
        stored = await transaction_store.record_transaction(
            session,
            {
                "supplier": request_body.supplier_id,
                "quantity": request_body.quantity,
                "less_kilo": request_body.less_kilo,
                "unit_price": request_body.unit_price,
                "total_kilo": totals.total_kilo,
                "total_price": totals.total_price,
                "total_amount": totals.total_price,
                "status": TransactionStatus.COMPLETED.value,
            },
        )
    except TransactionStoreError as e:
        store_fetch_failures_counter.labels(store="transactions").inc()
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction service unavailable")

    transaction_id = str(stored["_id"]) if stored.get("_id") else None

    applied = []
    auto_debit_complete = True
    try:
        loans = await loan_store.get_supplier_loans(session, request_body.supplier_id)
        for payment in allocate_auto_debit(totals.total_price, loans, reference_number=transaction_id):
            await loan_store.record_payment(session, payment)
            auto_debit_payment_counter.inc()
            applied.append(AutoDebitPaymentSchema(loan_id=payment.loan_id, amount=payment.amount))
    except LoanStoreError as e:
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(
            f"Auto-debit incomplete: {e}",
            extra={"request_id": request_id, "transaction_id": transaction_id},
        )
        auto_debit_complete = False

    return TransactionCreateResponse(
        transaction_id=transaction_id,
        supplier_id=request_body.supplier_id,
        total_kilo=totals.total_kilo,
        total_price=totals.total_price,
        status=TransactionStatus.COMPLETED.value,
        auto_debit_payments=applied,
        auto_debit_complete=auto_debit_complete,
    )
