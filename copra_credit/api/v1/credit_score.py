"""Credit score endpoints - score a supplier from their completed transactions"""

import logging
from fastapi import APIRouter, Depends, Request

from copra_credit.api.v1.schemas import ComputeScoreRequest, CreditScoreResponse
from copra_credit.api.dependencies import get_api_session, get_request_id, get_transaction_store
from copra_credit.infrastructure.clients.session import ApiSession
from copra_credit.infrastructure.clients.transactions import TransactionStoreClient
from copra_credit.domain.scoring import compute_score
from copra_credit.domain.exceptions import TransactionStoreError
from copra_credit.infrastructure.observability.metrics import record_score, store_fetch_failures_counter
from copra_credit.infrastructure.observability.logging import log_score_computed

router = APIRouter()


@router.get("/credit-score/{supplier_id}", response_model=CreditScoreResponse)
async def get_credit_score(
    supplier_id: str,
    request: Request,
    session: ApiSession = Depends(get_api_session),
    transaction_store: TransactionStoreClient = Depends(get_transaction_store),
):
    """
    Score a supplier from their current completed-transaction history.

    Scores are recomputed on every call. If the history cannot be fetched the
    supplier is scored as having no transactions and `history_available` is
    false.
    """
    request_id = get_request_id(request)
    history_available = True

    try:
        transactions = await transaction_store.get_completed_transactions(session, supplier_id)
    except TransactionStoreError as e:
        store_fetch_failures_counter.labels(store="transactions").inc()
        logging.warning(
            f"Transaction history unavailable, scoring empty history: {e}",
            extra={"request_id": request_id, "supplier_id": supplier_id},
        )
        transactions = []
        history_available = False

    result = compute_score(transactions)

    record_score(result)
    log_score_computed(request_id, supplier_id, result, history_available)

    return CreditScoreResponse.from_result(result, supplier_id=supplier_id, history_available=history_available)


@router.post("/credit-score/compute", response_model=CreditScoreResponse)
def compute_credit_score(request_body: ComputeScoreRequest):
    """Score a transaction list supplied by the caller (no store lookup)"""
    result = compute_score(t.to_domain() for t in request_body.transactions)
    return CreditScoreResponse.from_result(result)
