"""Tests for QuotaTracker."""

from datetime import datetime, timezone

from common.types import ObjectRecord
from vault.repositories.quota_tracker import QuotaTracker


def test_usage_defaults_to_zero():
    assert QuotaTracker({}).usage("alice") == 0


def test_add_and_release():
    quotas = {}
    tracker = QuotaTracker(quotas)

    tracker.add("alice", 100)
    tracker.add("alice", 50)
    assert tracker.usage("alice") == 150

    tracker.release("alice", 150)
    assert tracker.usage("alice") == 0
    assert "alice" not in quotas


def test_negative_delta_never_below_zero():
    tracker = QuotaTracker({"alice": 10})
    tracker.add("alice", -25)
    assert tracker.usage("alice") == 0


def test_total_stored_sums_declared_sizes():
    now = datetime.now(timezone.utc)
    records = [
        ObjectRecord(f"id-{size}", "n", "t", size, "alice", now, True, 100)
        for size in (10, 20, 30)
    ]
    assert QuotaTracker.total_stored(records) == 60
    assert QuotaTracker.total_stored([]) == 0
