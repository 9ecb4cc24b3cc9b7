"""Credit score engine - core business logic for supplier loan eligibility"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List
from copra_credit.domain.models import Transaction, TransactionStatus, ScoreCategory, ScoreResult
from copra_credit.domain.constants import (
    CREDIT_PERCENTAGE,
    IDEAL_TRANSACTION_CYCLE,
    STARTER_SCORE,
    STARTER_COUNT_SCORE,
    CATEGORY_THRESHOLDS,
)

_CATEGORY_COLORS = {
    ScoreCategory.NO_SCORE: "text-gray-400",
    ScoreCategory.POOR: "text-red-500",
    ScoreCategory.FAIR: "text-yellow-500",
    ScoreCategory.GOOD: "text-blue-500",
    ScoreCategory.VERY_GOOD: "text-emerald-500",
    ScoreCategory.EXCELLENT: "text-green-500",
}
_DEFAULT_COLOR = "text-gray-500"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, not 2)"""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def completed_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Only completed purchases count toward a supplier's score"""
    return [t for t in transactions if t.status == TransactionStatus.COMPLETED]


def category_of(score: int) -> ScoreCategory:
    """Map a score to its category; first matching upper bound wins."""
    for upper_bound, label in CATEGORY_THRESHOLDS:
        if score <= upper_bound:
            return ScoreCategory(label)
    return ScoreCategory.EXCELLENT


def category_color(category: ScoreCategory | str) -> str:
    """Presentation color token for a category"""
    try:
        return _CATEGORY_COLORS[ScoreCategory(category)]
    except ValueError:
        return _DEFAULT_COLOR


def is_eligible_for_loan(transaction_count: int) -> bool:
    """
    A supplier may borrow once they have at least one completed transaction.

    The score is deliberately not a factor.
    """
    return transaction_count >= 1


def compute_score(transactions: Iterable[Transaction]) -> ScoreResult:
    """
    Score a supplier's transaction history.

    Sub-scores are based on supplied volume (quantity), not peso value:
    - transaction_consistency: smallest / largest single supply
    - total_supply_score: total supplied vs. every transaction at peak size
    - transaction_count_score: count vs. an ideal cycle of 10, capped at 100

    The composite score is the unweighted mean of the three sub-scores, except
    for a single transaction which gets the fixed starter score of 20.

    Quantities must be non-negative and finite; they are not validated.
    """
    completed = completed_transactions(transactions)
    n = len(completed)

    if n == 0:
        return ScoreResult(
            score=0,
            category=ScoreCategory.NO_SCORE,
            transaction_consistency=0,
            total_supply_score=0,
            transaction_count_score=0,
            average_transaction_amount=0.0,
            eligible_amount=0,
            credit_percentage=0.0,
            transaction_count=0,
            is_eligible=False,
        )

    amounts = [t.quantity for t in completed]
    total_supplied = sum(amounts)
    average = total_supplied / n

    if n == 1:
        consistency = 100.0
        supply_score = 100.0
        count_score = float(STARTER_COUNT_SCORE)
        score = STARTER_SCORE
    else:
        smallest = min(amounts)
        largest = max(amounts)

        # All-zero history: nothing supplied, nothing to compare against
        if largest > 0:
            consistency = (smallest / largest) * 100
            supply_score = (total_supplied / (largest * n)) * 100
        else:
            consistency = 0.0
            supply_score = 0.0

        count_score = min(100.0, (n / IDEAL_TRANSACTION_CYCLE) * 100)
        score = round_half_up((consistency + supply_score + count_score) / 3)

    return ScoreResult(
        score=score,
        category=category_of(score),
        transaction_consistency=round_half_up(consistency),
        total_supply_score=round_half_up(supply_score),
        transaction_count_score=round_half_up(count_score),
        average_transaction_amount=average,
        eligible_amount=round_half_up(average * CREDIT_PERCENTAGE),
        credit_percentage=CREDIT_PERCENTAGE,
        transaction_count=n,
        is_eligible=is_eligible_for_loan(n),
    )
