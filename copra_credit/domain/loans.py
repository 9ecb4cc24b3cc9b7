"""Loan policy: request limits, due dates, repayment progress and auto-debit"""

import math
from datetime import datetime, timezone
from typing import Iterable, List
from copra_credit.domain.models import Loan, LoanAction, LoanPayment, LoanRequest, LoanStatus, ScoreResult
from copra_credit.domain.constants import AUTO_DEBIT_PERCENT, LOAN_DUE_DAYS, MANUAL_PAYMENT_METHODS
from copra_credit.domain.exceptions import (
    InvalidLoanAmountError,
    InvalidLoanTransitionError,
    InvalidPaymentError,
    LoanNotEligibleError,
)
from copra_credit.domain.scoring import round_half_up
from copra_credit.utils.date_utils import add_days, as_utc

AUTO_DEBIT_METHOD = "auto-debit"

# action -> (statuses it may be taken from, resulting status)
LOAN_TRANSITIONS = {
    LoanAction.APPROVE: ((LoanStatus.PENDING,), LoanStatus.APPROVED),
    LoanAction.REJECT: ((LoanStatus.PENDING,), LoanStatus.REJECTED),
    LoanAction.CANCEL: ((LoanStatus.APPROVED, LoanStatus.REJECTED), LoanStatus.CANCELLED),
    LoanAction.VOID: ((LoanStatus.APPROVED, LoanStatus.REJECTED), LoanStatus.VOIDED),
}


def clamp_loan_amount(requested_amount: float, eligible_amount: float) -> float:
    """Cap a requested principal at the supplier's eligible amount"""
    return max(0.0, min(requested_amount, eligible_amount))


def calculate_due_date(created_at: datetime) -> datetime:
    return add_days(created_at, LOAN_DUE_DAYS)


def build_loan_request(
    supplier_id: str,
    requested_amount: float,
    score_result: ScoreResult,
    purpose: str = "",
    created_at: datetime | None = None,
) -> LoanRequest:
    """
    Turn a supplier's loan request into what the loan store accepts.

    Requirements:
    - Supplier must have at least one completed transaction
    - Amount is clamped to the eligible amount from the credit score
    - Repaid by auto-debit of 100% of future transaction proceeds
    - Due 45 days after the request

    Raises:
        LoanNotEligibleError: Supplier has no completed transactions
        InvalidLoanAmountError: Requested amount is zero or negative, or the
            eligible amount rounds to zero
    """
    if not score_result.is_eligible:
        raise LoanNotEligibleError(
            "At least one completed transaction is required to request a loan"
        )
    if requested_amount <= 0:
        raise InvalidLoanAmountError(f"Requested amount must be positive, got {requested_amount}")

    if created_at is None:
        created_at = datetime.now(timezone.utc)

    amount = clamp_loan_amount(requested_amount, score_result.eligible_amount)
    if amount <= 0:
        raise InvalidLoanAmountError(
            f"Eligible amount is {score_result.eligible_amount}; nothing can be borrowed yet"
        )

    return LoanRequest(
        supplier_id=supplier_id,
        amount=amount,
        requested_amount=requested_amount,
        purpose=purpose,
        payment_percent=AUTO_DEBIT_PERCENT,
        due_date=calculate_due_date(created_at),
    )


def remaining_balance(loan: Loan) -> float:
    return max(0.0, loan.total_due - loan.total_paid)


def repayment_progress(loan: Loan) -> int:
    """Percent of the loan (with interest) repaid, capped at 100"""
    if loan.total_due <= 0:
        return 0
    return min(100, round_half_up(loan.total_paid / loan.total_due * 100))


def days_until_due(loan: Loan, now: datetime | None = None) -> int | None:
    """Whole days left before the due date, rounded up; negative once overdue"""
    if loan.due_date is None:
        return None
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = (as_utc(loan.due_date) - as_utc(now)).total_seconds()
    return math.ceil(seconds / 86400)


def allocate_auto_debit(proceeds: float, loans: Iterable[Loan], reference_number: str | None = None) -> List[LoanPayment]:
    """
    Apply a new transaction's proceeds to the supplier's outstanding loans.

    Only approved loans with a remaining balance are debited, earliest due
    date first (loans without a due date go last). Stops when the deductible
    proceeds run out.
    """
    available = proceeds * AUTO_DEBIT_PERCENT / 100
    outstanding = [
        loan for loan in loans
        if loan.status == LoanStatus.APPROVED and remaining_balance(loan) > 0
    ]
    outstanding.sort(key=lambda loan: (loan.due_date is None, as_utc(loan.due_date or datetime.min)))

    payments = []
    for loan in outstanding:
        if available <= 0:
            break

        amount = min(available, remaining_balance(loan))
        payments.append(
            LoanPayment(
                loan_id=loan.loan_id,
                amount=amount,
                payment_method=AUTO_DEBIT_METHOD,
                reference_number=reference_number,
                notes="Automatic deduction from transaction proceeds",
            )
        )
        available -= amount

    return payments


def next_loan_status(loan: Loan, action: LoanAction) -> LoanStatus:
    """
    Status a loan moves to when an admin or owner takes an action on it.

    Pending loans are approved or rejected; approved or rejected loans may be
    cancelled or voided. Paid, cancelled and voided loans are final.

    Raises:
        InvalidLoanTransitionError: Action not allowed from the current status
    """
    allowed_from, target = LOAN_TRANSITIONS[LoanAction(action)]
    if loan.status not in allowed_from:
        raise InvalidLoanTransitionError(
            f"Cannot {LoanAction(action).value} a loan that is {loan.status.value}"
        )
    return target


def build_manual_payment(
    loan: Loan,
    amount: float,
    payment_method: str,
    reference_number: str | None = None,
    notes: str | None = None,
) -> LoanPayment:
    """
    Validate a payment recorded by staff against an approved loan.

    Raises:
        InvalidPaymentError: Unknown method, non-positive amount, loan not
            approved, or amount above the remaining balance
    """
    if payment_method not in MANUAL_PAYMENT_METHODS:
        raise InvalidPaymentError(
            f"Payment method must be one of {', '.join(MANUAL_PAYMENT_METHODS)}, got {payment_method!r}"
        )
    if amount <= 0:
        raise InvalidPaymentError(f"Payment amount must be positive, got {amount}")
    if loan.status != LoanStatus.APPROVED:
        raise InvalidPaymentError(f"Payments apply to approved loans only; loan is {loan.status.value}")

    balance = remaining_balance(loan)
    if amount > balance:
        raise InvalidPaymentError(f"Payment {amount} exceeds remaining balance {balance}")

    return LoanPayment(
        loan_id=loan.loan_id,
        amount=amount,
        payment_method=payment_method,
        reference_number=reference_number,
        notes=notes,
    )
