"""Loan endpoints - supplier loan requests and repayment status"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request

from copra_credit.api.v1.schemas import (
    LoanActionBody,
    LoanActionResponse,
    LoanPaymentSchema,
    LoanPaymentsResponse,
    LoanRequestBody,
    LoanRequestResponse,
    LoanSummarySchema,
    ManualPaymentBody,
    ManualPaymentResponse,
    SupplierLoansResponse,
)
from copra_credit.api.dependencies import get_api_session, get_loan_store, get_request_id, get_transaction_store, require_role
from copra_credit.infrastructure.clients.session import ApiSession, ADMIN, OWNER, SUPPLIER
from copra_credit.infrastructure.clients.transactions import TransactionStoreClient
from copra_credit.infrastructure.clients.loans import LoanStoreClient
from copra_credit.domain.scoring import compute_score
from copra_credit.domain.loans import (
    AUTO_DEBIT_METHOD,
    build_loan_request,
    build_manual_payment,
    next_loan_status,
    remaining_balance,
)
from copra_credit.domain.models import LoanAction, LoanStatus
from copra_credit.domain.exceptions import (
    InvalidLoanAmountError,
    InvalidLoanTransitionError,
    InvalidPaymentError,
    LoanNotEligibleError,
    LoanStoreError,
    TransactionStoreError,
)
from copra_credit.infrastructure.observability.metrics import (
    loan_action_counter,
    loan_request_counter,
    manual_payment_counter,
    store_fetch_failures_counter,
)
from copra_credit.infrastructure.observability.logging import log_loan_request

router = APIRouter()


@router.post("/loans", response_model=LoanRequestResponse)
async def request_loan(
    request_body: LoanRequestBody,
    request: Request,
    session: ApiSession = Depends(require_role(SUPPLIER, ADMIN)),
    transaction_store: TransactionStoreClient = Depends(get_transaction_store),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """
    Submit a loan request against future transactions.

    Flow:
    1. Fetch completed transactions and compute the credit score
    2. Reject if the supplier has no completed transactions
    3. Clamp the amount to the eligible amount, set the 45-day due date
    4. Forward the request to the loan store (created as pending)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Score current history; an unreachable store counts as no history
        try:
            transactions = await transaction_store.get_completed_transactions(session, request_body.supplier_id)
        except TransactionStoreError as e:
            store_fetch_failures_counter.labels(store="transactions").inc()
            logging.warning(f"Transaction history unavailable: {e}", extra={"request_id": request_id})
            transactions = []

        score_result = compute_score(transactions)

        # 2-3. Apply loan policy
        loan_request = build_loan_request(
            supplier_id=request_body.supplier_id,
            requested_amount=request_body.amount,
            score_result=score_result,
            purpose=request_body.purpose,
        )

        # 4. Submit to the loan store
        created = await loan_store.create_loan(session, loan_request)

        clamped = loan_request.amount < loan_request.requested_amount
        loan_request_counter.labels(outcome="clamped" if clamped else "submitted").inc()
        duration_ms = (time.time() - start_time) * 1000
        log_loan_request(request_id, loan_request, duration_ms)

        return LoanRequestResponse(
            loan_id=str(created["_id"]) if created.get("_id") else None,
            supplier_id=loan_request.supplier_id,
            requested_amount=loan_request.requested_amount,
            amount=loan_request.amount,
            eligible_amount=score_result.eligible_amount,
            clamped=clamped,
            payment_percent=loan_request.payment_percent,
            due_date=loan_request.due_date,
            status=created.get("status", LoanStatus.PENDING.value),
        )

    except LoanNotEligibleError as e:
        loan_request_counter.labels(outcome="ineligible").inc()
        logging.warning(f"Loan request rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except InvalidLoanAmountError as e:
        loan_request_counter.labels(outcome="invalid").inc()
        raise HTTPException(status_code=422, detail=str(e))

    except LoanStoreError as e:
        loan_request_counter.labels(outcome="failed").inc()
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(f"Loan store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Loan service unavailable")

    except Exception as e:
        loan_request_counter.labels(outcome="failed").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/loans/supplier/{supplier_id}", response_model=SupplierLoansResponse)
async def get_supplier_loans(
    supplier_id: str,
    request: Request,
    session: ApiSession = Depends(get_api_session),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """
    List a supplier's loans with remaining balance and repayment progress.
    """
    try:
        loans = await loan_store.get_supplier_loans(session, supplier_id)
    except LoanStoreError as e:
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(f"Loan store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Loan service unavailable")

    return SupplierLoansResponse(
        supplier_id=supplier_id,
        loans=[LoanSummarySchema.from_loan(loan) for loan in loans],
    )


@router.patch("/loans/{loan_id}/{action}", response_model=LoanActionResponse)
async def change_loan_status(
    loan_id: str,
    action: LoanAction,
    request: Request,
    request_body: Optional[LoanActionBody] = None,
    session: ApiSession = Depends(require_role(ADMIN, OWNER)),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """
    Approve, reject, cancel or void a loan.

    Pending loans can be approved or rejected; approved or rejected loans can
    be cancelled or voided. Anything else is refused with 409 before the
    store is called.
    """
    request_id = get_request_id(request)

    try:
        loan = await loan_store.get_loan(session, loan_id)
        target = next_loan_status(loan, action)

        if action == LoanAction.APPROVE:
            await loan_store.approve_loan(session, loan_id)
        elif action == LoanAction.REJECT:
            await loan_store.reject_loan(session, loan_id)
        elif action == LoanAction.CANCEL:
            await loan_store.cancel_loan(session, loan_id)
        else:
            reason = request_body.reason if request_body else None
            await loan_store.void_loan(session, loan_id, reason)

    except InvalidLoanTransitionError as e:
        loan_action_counter.labels(action=action.value, outcome="refused").inc()
        raise HTTPException(status_code=409, detail=str(e))

    except LoanStoreError as e:
        loan_action_counter.labels(action=action.value, outcome="failed").inc()
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(f"Loan store error: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=503, detail="Loan service unavailable")

    loan_action_counter.labels(action=action.value, outcome="applied").inc()
    logging.info(
        "Loan status changed",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "action": action.value,
            "previous_status": loan.status.value,
            "status": target.value,
        },
    )

    return LoanActionResponse(
        loan_id=loan_id,
        action=action.value,
        previous_status=loan.status.value,
        status=target.value,
    )


@router.post("/loans/{loan_id}/payments", response_model=ManualPaymentResponse)
async def record_manual_payment(
    loan_id: str,
    request_body: ManualPaymentBody,
    request: Request,
    session: ApiSession = Depends(require_role(ADMIN, OWNER)),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """
    Record a cash, bank or credit payment against an approved loan.
    """
    request_id = get_request_id(request)

    try:
        loan = await loan_store.get_loan(session, loan_id)
        payment = build_manual_payment(
            loan,
            amount=request_body.amount,
            payment_method=request_body.payment_method,
            reference_number=request_body.reference_number,
            notes=request_body.notes,
        )
        await loan_store.record_payment(session, payment)

    except InvalidPaymentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    except LoanStoreError as e:
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(f"Loan store error: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=503, detail="Loan service unavailable")

    manual_payment_counter.labels(method=payment.payment_method).inc()

    return ManualPaymentResponse(
        payment=LoanPaymentSchema.from_payment(payment),
        remaining_balance=remaining_balance(loan) - payment.amount,
    )


@router.get("/loans/{loan_id}/payments", response_model=LoanPaymentsResponse)
async def get_loan_payments(
    loan_id: str,
    request: Request,
    session: ApiSession = Depends(get_api_session),
    loan_store: LoanStoreClient = Depends(get_loan_store),
):
    """List a loan's payments in store order."""
    try:
        payments = await loan_store.get_loan_payments(session, loan_id)
    except LoanStoreError as e:
        store_fetch_failures_counter.labels(store="loans").inc()
        logging.error(f"Loan store error: {e}", extra={"request_id": get_request_id(request), "loan_id": loan_id})
        raise HTTPException(status_code=503, detail="Loan service unavailable")

    return LoanPaymentsResponse(
        loan_id=loan_id,
        payments=[LoanPaymentSchema.from_payment(p) for p in payments],
        auto_debit_count=sum(1 for p in payments if p.payment_method == AUTO_DEBIT_METHOD),
    )
