"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from copra_credit.domain.models import Transaction, TransactionStatus, ScoreResult, Loan, LoanPayment
from copra_credit.domain.scoring import category_color
from copra_credit.domain.loans import remaining_balance, repayment_progress, days_until_due


class TransactionSchema(BaseModel):
    """Transaction supplied directly for scoring"""

    transaction_id: str = ""
    supplier_id: str = ""
    date: datetime
    quantity: float = Field(..., ge=0, description="Net kilos supplied")
    total_amount: float = Field(0.0, ge=0, description="Peso value")
    status: TransactionStatus = TransactionStatus.COMPLETED

    def to_domain(self) -> Transaction:
        return Transaction(
            transaction_id=self.transaction_id,
            supplier_id=self.supplier_id,
            date=self.date,
            quantity=self.quantity,
            total_amount=self.total_amount,
            status=self.status,
        )


class ComputeScoreRequest(BaseModel):
    """Request body for POST /v1/credit-score/compute"""

    transactions: List[TransactionSchema] = Field(default_factory=list)


class CreditScoreResponse(BaseModel):
    """Response for the credit score endpoints"""

    supplier_id: Optional[str] = None
    score: int
    category: str
    category_color: str
    transaction_consistency: int
    total_supply_score: int
    transaction_count_score: int
    average_transaction_amount: float
    eligible_amount: int
    credit_percentage: float
    transaction_count: int
    is_eligible: bool
    history_available: bool = True

    @classmethod
    def from_result(
        cls, result: ScoreResult, supplier_id: str | None = None, history_available: bool = True
    ) -> "CreditScoreResponse":
        return cls(
            supplier_id=supplier_id,
            score=result.score,
            category=result.category.value,
            category_color=category_color(result.category),
            transaction_consistency=result.transaction_consistency,
            total_supply_score=result.total_supply_score,
            transaction_count_score=result.transaction_count_score,
            average_transaction_amount=result.average_transaction_amount,
            eligible_amount=result.eligible_amount,
            credit_percentage=result.credit_percentage,
            transaction_count=result.transaction_count,
            is_eligible=result.is_eligible,
            history_available=history_available,
        )


class LoanRequestBody(BaseModel):
    """Request body for POST /v1/loans"""

    supplier_id: str = Field(..., min_length=1, description="Supplier identifier")
    amount: float = Field(..., gt=0, description="Requested principal in pesos")
    purpose: str = Field("", max_length=500)


class LoanRequestResponse(BaseModel):
    """Response for POST /v1/loans"""

    loan_id: Optional[str] = None
    supplier_id: str
    requested_amount: float
    amount: float
    eligible_amount: int
    clamped: bool
    payment_percent: int
    due_date: datetime
    status: str


class LoanSummarySchema(BaseModel):
    """Single loan with repayment progress"""

    loan_id: str
    amount: float
    status: str
    interest_rate: float
    total_due: float
    total_paid: float
    remaining_balance: float
    repayment_progress: int
    due_date: Optional[datetime] = None
    days_until_due: Optional[int] = None

    @classmethod
    def from_loan(cls, loan: Loan, now: datetime | None = None) -> "LoanSummarySchema":
        return cls(
            loan_id=loan.loan_id,
            amount=loan.amount,
            status=loan.status.value,
            interest_rate=loan.interest_rate,
            total_due=loan.total_due,
            total_paid=loan.total_paid,
            remaining_balance=remaining_balance(loan),
            repayment_progress=repayment_progress(loan),
            due_date=loan.due_date,
            days_until_due=days_until_due(loan, now),
        )


class SupplierLoansResponse(BaseModel):
    """Response for GET /v1/loans/supplier/{supplier_id}"""

    supplier_id: str
    loans: List[LoanSummarySchema]


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    supplier_id: str = Field(..., min_length=1, description="Supplier identifier")
    quantity: float = Field(..., gt=0, description="Gross kilos delivered")
    less_kilo: float = Field(0.0, ge=0, description="Kilos deducted before pricing")
    unit_price: float = Field(..., ge=0, description="Peso price per kilo")


class LoanActionBody(BaseModel):
    """Optional body for PATCH /v1/loans/{loan_id}/{action}"""

    reason: Optional[str] = Field(None, max_length=500)


class LoanActionResponse(BaseModel):
    """Response for PATCH /v1/loans/{loan_id}/{action}"""

    loan_id: str
    action: str
    previous_status: str
    status: str


class ManualPaymentBody(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/payments"""

    amount: float = Field(..., gt=0, description="Pesos paid")
    payment_method: str = Field(..., description="cash, bank or credit")
    reference_number: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class LoanPaymentSchema(BaseModel):
    """Single payment in a loan's history"""

    payment_id: Optional[str] = None
    loan_id: str
    amount: float
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = None

    @classmethod
    def from_payment(cls, payment: LoanPayment) -> "LoanPaymentSchema":
        return cls(
            payment_id=payment.payment_id,
            loan_id=payment.loan_id,
            amount=payment.amount,
            payment_method=payment.payment_method,
            reference_number=payment.reference_number,
            notes=payment.notes,
            payment_date=payment.payment_date,
        )


class ManualPaymentResponse(BaseModel):
    """Response for POST /v1/loans/{loan_id}/payments"""

    payment: LoanPaymentSchema
    remaining_balance: float


class LoanPaymentsResponse(BaseModel):
    """Response for GET /v1/loans/{loan_id}/payments"""

    loan_id: str
    payments: List[LoanPaymentSchema]
    auto_debit_count: int


class AutoDebitPaymentSchema(BaseModel):
    loan_id: str
    amount: float


class TransactionCreateResponse(BaseModel):
    """Response for POST /v1/transactions"""

    transaction_id: Optional[str] = None
    supplier_id: str
    total_kilo: float
    total_price: float
    status: str
    auto_debit_payments: List[AutoDebitPaymentSchema]
    auto_debit_complete: bool = True
