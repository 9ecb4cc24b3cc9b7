"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from copra_credit.domain.models import LoanRequest, ScoreResult


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "copra-credit"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_score_computed(request_id: str, supplier_id: str, result: ScoreResult, history_available: bool) -> None:
    """Log a credit score computation for analysis"""
    logging.info(
        "Credit score computed",
        extra={
            "request_id": request_id,
            "supplier_id": supplier_id,
            "step": "credit_score",
            "score": result.score,
            "category": result.category.value,
            "transaction_count": result.transaction_count,
            "eligible_amount": result.eligible_amount,
            "history_available": history_available,
        },
    )


def log_loan_request(request_id: str, loan_request: LoanRequest, duration_ms: float) -> None:
    """Log a submitted loan request, including any clamping applied"""
    logging.info(
        "Loan request submitted",
        extra={
            "request_id": request_id,
            "supplier_id": loan_request.supplier_id,
            "step": "loan_request",
            "requested_amount": loan_request.requested_amount,
            "amount": loan_request.amount,
            "clamped": loan_request.amount < loan_request.requested_amount,
            "due_date": loan_request.due_date.isoformat(),
            "duration_ms": duration_ms,
        },
    )
