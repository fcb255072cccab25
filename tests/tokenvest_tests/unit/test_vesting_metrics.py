"""
Unit tests for vesting Prometheus metrics.
"""

from prometheus_client import CollectorRegistry

from tokenvest.core.vesting_metrics import VestingMetrics, get_vesting_metrics


def test_counters_and_gauge():
    metrics = VestingMetrics(registry=CollectorRegistry())
    metrics.record_claim("requested")
    metrics.record_confirmed(250)
    metrics.set_pending(3)
    metrics.record_inconsistency()

    sample = metrics.registry.get_sample_value
    assert sample("tokenvest_claims_total", {"status": "requested"}) == 1
    assert sample("tokenvest_claims_total", {"status": "confirmed"}) == 1
    assert sample("tokenvest_claims_total", {"status": "inconsistent"}) == 1
    assert sample("tokenvest_claimed_tokens_total") == 250
    assert sample("tokenvest_pending_transfers") == 3
    assert sample("tokenvest_ledger_inconsistencies_total") == 1


def test_default_metrics_is_shared():
    assert get_vesting_metrics() is get_vesting_metrics()
