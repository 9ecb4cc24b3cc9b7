"""Prometheus metrics for credit scores, loan requests, and store health"""

from prometheus_client import Counter, Histogram

from copra_credit.domain.models import ScoreResult

# Scoring metrics
credit_score_counter = Counter(
    "copra_credit_score_total",
    "Credit scores computed",
    ["category"],  # No Score | Poor | Fair | Good | Very Good | Excellent
)

eligible_amount_histogram = Histogram(
    "copra_eligible_amount",
    "Eligible loan amount in pesos for eligible suppliers",
    buckets=[100, 500, 1_000, 5_000, 10_000, 25_000, 50_000, 100_000],
)

# Loan metrics
loan_request_counter = Counter(
    "copra_loan_request_total",
    "Loan requests handled",
    ["outcome"],  # submitted | clamped | ineligible | invalid | failed
)

auto_debit_payment_counter = Counter(
    "copra_auto_debit_payments_total",
    "Loan payments deducted from transaction proceeds",
)

# Remote store metrics
store_fetch_failures_counter = Counter(
    "store_fetch_failures_total",
    "Failed remote store calls",
    ["store"],  # transactions | loans
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(result: ScoreResult) -> None:
    """Record score distribution and eligible limits"""
    credit_score_counter.labels(category=result.category.value).inc()
    if result.is_eligible:
        eligible_amount_histogram.observe(result.eligible_amount)


loan_action_counter = Counter(
    "copra_loan_action_total",
    "Loan status changes by admins and owners",
    ["action", "outcome"],  # approve | reject | cancel | void ; applied | refused | failed
)

manual_payment_counter = Counter(
    "copra_manual_payments_total",
    "Loan payments recorded by staff",
    ["method"],  # cash | bank | credit
)
