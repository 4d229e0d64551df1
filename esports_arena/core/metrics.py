"""
Prometheus metrics for the esports arena API.

HTTP request metrics come from prometheus-fastapi-instrumentator (see
``main``); the counters below track domain events.
"""
from prometheus_client import Counter, Gauge

tournament_registrations_total = Counter(
    "tournament_registrations_total",
    "Tournament registration attempts",
    ["outcome"]  # accepted, full
)

wallet_transactions_total = Counter(
    "wallet_transactions_total",
    "Wallet transactions created",
    ["type"]
)

withdrawal_reviews_total = Counter(
    "withdrawal_reviews_total",
    "Withdrawal reviews performed by admins",
    ["decision"]  # approved, rejected
)

match_results_total = Counter(
    "match_results_total",
    "Match results recorded"
)

entities_deleted_total = Counter(
    "entities_deleted_total",
    "Cascading deletes performed",
    ["entity"]
)

pending_withdrawals = Gauge(
    "pending_withdrawals",
    "Withdrawals awaiting admin review at the last dashboard snapshot"
)


def record_registration(outcome: str) -> None:
    """Record a registration attempt (``accepted`` or ``full``)."""
    tournament_registrations_total.labels(outcome=outcome).inc()


def record_wallet_transaction(transaction_type: str) -> None:
    """Record a created wallet transaction by type."""
    wallet_transactions_total.labels(type=transaction_type).inc()


def record_withdrawal_review(decision: str) -> None:
    """Record an approved or rejected withdrawal."""
    withdrawal_reviews_total.labels(decision=decision).inc()


def record_match_result() -> None:
    match_results_total.inc()


def record_delete(entity: str) -> None:
    entities_deleted_total.labels(entity=entity).inc()


def update_dashboard_metrics(stats) -> None:
    """Mirror dashboard figures that are useful as gauges."""
    pending_withdrawals.set(stats.pending_withdrawals)
