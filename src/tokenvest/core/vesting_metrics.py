"""
Vesting claim metrics.

Prometheus metrics for the claim path: claims by outcome, confirmed payout
volume, outstanding transfers and fatal ledger inconsistencies.
"""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge


class VestingMetrics:
    """Metrics for claim coordination."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or REGISTRY

        self.claims_total = Counter(
            'tokenvest_claims_total',
            'Claim attempts by outcome',
            ['status'],
            registry=self.registry
        )

        self.claimed_tokens = Counter(
            'tokenvest_claimed_tokens_total',
            'Token units paid out by confirmed claims',
            registry=self.registry
        )

        self.pending_transfers = Gauge(
            'tokenvest_pending_transfers',
            'Claims waiting for a transfer outcome',
            registry=self.registry
        )

        self.ledger_inconsistencies = Counter(
            'tokenvest_ledger_inconsistencies_total',
            'Confirmed transfers that could not be recorded in the ledger',
            registry=self.registry
        )

    def record_claim(self, status: str) -> None:
        self.claims_total.labels(status=status).inc()

    def record_confirmed(self, amount: int) -> None:
        self.claims_total.labels(status="confirmed").inc()
        if amount > 0:
            self.claimed_tokens.inc(amount)

    def record_inconsistency(self) -> None:
        self.claims_total.labels(status="inconsistent").inc()
        self.ledger_inconsistencies.inc()

    def set_pending(self, count: int) -> None:
        self.pending_transfers.set(count)


_global_vesting_metrics: VestingMetrics | None = None


def get_vesting_metrics() -> VestingMetrics:
    """Process-wide metrics registered on the default registry."""
    global _global_vesting_metrics
    if _global_vesting_metrics is None:
        _global_vesting_metrics = VestingMetrics()
    return _global_vesting_metrics
