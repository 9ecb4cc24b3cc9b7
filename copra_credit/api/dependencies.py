"""Dependency injection for FastAPI endpoints"""

from typing import Callable
from fastapi import Depends, HTTPException, Request
from copra_credit.infrastructure.clients.session import ApiSession
from copra_credit.infrastructure.clients.transactions import TransactionStoreClient
from copra_credit.infrastructure.clients.loans import LoanStoreClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_api_session(request: Request) -> ApiSession:
    """Build the caller's session from request headers"""
    authorization = request.headers.get("Authorization", "")
    token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else None
    return ApiSession(
        token=token or None,
        role=request.headers.get("X-User-Role"),
        user_id=request.headers.get("X-User-Id"),
    )


def require_role(*roles: str) -> Callable[[ApiSession], ApiSession]:
    """Restrict an endpoint to the given dashboard roles"""

    def check(session: ApiSession = Depends(get_api_session)) -> ApiSession:
        if session.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {', '.join(roles)}")
        return session

    return check


def get_transaction_store() -> TransactionStoreClient:
    """Provide transaction store client instance"""
    return TransactionStoreClient()


def get_loan_store() -> LoanStoreClient:
    """Provide loan store client instance"""
    return LoanStoreClient()
