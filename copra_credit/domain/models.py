"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    VOIDED = "voided"


class LoanStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    CANCELLED = "cancelled"
    VOIDED = "voided"


class LoanAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    VOID = "void"


class ScoreCategory(str, Enum):
    NO_SCORE = "No Score"
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    VERY_GOOD = "Very Good"
    EXCELLENT = "Excellent"


@dataclass(frozen=True)
class Transaction:
    """Copra purchase from a supplier, as returned by the transaction store"""

    transaction_id: str
    supplier_id: str
    date: datetime
    quantity: float  # net kilos
    total_amount: float  # pesos
    status: TransactionStatus


@dataclass(frozen=True)
class TransactionTotals:
    """Net weight and price of a purchase after deductions"""

    total_kilo: float
    total_price: float


@dataclass(frozen=True)
class ScoreResult:
    """Output of the credit score engine"""

    score: int
    category: ScoreCategory
    transaction_consistency: int
    total_supply_score: int
    transaction_count_score: int
    average_transaction_amount: float
    eligible_amount: int
    credit_percentage: float
    transaction_count: int
    is_eligible: bool


@dataclass
class Loan:
    """Loan record held by the loan store"""

    loan_id: str
    supplier_id: str
    amount: float
    status: LoanStatus
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    interest_rate: float = 0.0  # percent
    total_paid: float = 0.0
    total_amount_with_interest: Optional[float] = None

    @property
    def total_due(self) -> float:
        """Amount owed including interest; the store omits it for interest-free loans"""
        if self.total_amount_with_interest:
            return self.total_amount_with_interest
        return self.amount


@dataclass(frozen=True)
class LoanRequest:
    """Loan request ready to be submitted to the loan store"""

    supplier_id: str
    amount: float
    requested_amount: float
    purpose: str
    payment_percent: int
    due_date: datetime


@dataclass(frozen=True)
class LoanPayment:
    """Payment applied against a loan"""

    loan_id: str
    amount: float
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    payment_id: Optional[str] = None
    payment_date: Optional[datetime] = None
