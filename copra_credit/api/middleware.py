"""Request context, access logging and latency metrics"""

import logging
import time
import uuid
from typing import Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from copra_credit.infrastructure.observability.metrics import request_duration_histogram

# Path parameters worth carrying on every access line
CONTEXT_PARAMS = ("supplier_id", "loan_id")

access_logger = logging.getLogger("copra_credit.access")


def route_template(request: Request) -> str:
    """Matched route path, e.g. /v1/loans/supplier/{supplier_id}; raw path when nothing matched"""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def request_context(request: Request) -> Dict[str, str]:
    """Supplier and loan ids bound by the router for this request"""
    params = request.scope.get("path_params") or {}
    return {name: params[name] for name in CONTEXT_PARAMS if name in params}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and write one access line per request.

    An incoming X-Request-ID is kept so a caller can follow a supplier's
    loan request across the transaction and loan stores.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        access_logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "route": route_template(request),
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                **request_context(request),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Request latency by route template, so supplier ids stay out of the label set"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=route_template(request),
            status=response.status_code,
        ).observe(time.perf_counter() - start)
        return response
