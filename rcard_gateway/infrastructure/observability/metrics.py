"""Prometheus metrics for loan volume, policy rejections and repayments"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Loan metrics
loans_created_counter = Counter(
    "rcard_loans_created_total",
    "Total loans opened",
    ["card_type"],  # credit | debit | merchant | custom
)

loan_rejection_counter = Counter(
    "rcard_loan_rejections_total",
    "Loan operations refused by validation or policy",
    ["reason"],  # below_min_days | yearly_limit_exceeded | insufficient_balance | ...
)

loan_principal_histogram = Histogram(
    "rcard_loan_principal",
    "Principal of newly opened loans",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# Repayment metrics
repayment_counter = Counter(
    "rcard_repayments_total",
    "Loan repayments applied",
    ["outcome"],  # full | partial
)

repayment_amount_histogram = Histogram(
    "rcard_repayment_amount",
    "Amount paid per repayment",
    buckets=[10, 50, 100, 250, 500, 1000, 2500, 5000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_created(card_type: str, principal: Decimal) -> None:
    loans_created_counter.labels(card_type=card_type).inc()
    loan_principal_histogram.observe(float(principal))


def record_repayment(fully_paid: bool, amount: Decimal) -> None:
    """Record repayment metrics for settlement rate and ticket size"""
    outcome = "full" if fully_paid else "partial"
    repayment_counter.labels(outcome=outcome).inc()
    repayment_amount_histogram.observe(float(amount))
