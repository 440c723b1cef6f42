import pytest

from event_ingest.cost_tracker import CostTracker


def test_track_usage_accumulates_cost_per_model():
    tracker = CostTracker()

    tracker.track_usage("mistral-small-latest", 1_000_000, 1_000_000)
    tracker.track_usage("mistral-small-latest", 1_000_000, 0)

    assert tracker.get_monthly_costs()["mistral-small-latest"] == pytest.approx(0.35)
    assert tracker.get_total_cost() == pytest.approx(0.35)


def test_token_usage_per_model():
    tracker = CostTracker()

    tracker.track_usage("mistral-small-latest", 1200, 300)
    tracker.track_usage("deepseek-chat", 100, 50)

    usage = tracker.get_token_usage()
    assert usage["mistral-small-latest"] == {"input": 1200, "output": 300, "total": 1500}
    assert usage["deepseek-chat"]["total"] == 150


def test_unknown_model_is_ignored():
    tracker = CostTracker()

    tracker.track_usage("gpt-unknown", 1000, 1000)

    assert tracker.get_monthly_costs() == {}
    assert tracker.get_total_cost() == 0


def test_reset_monthly_costs():
    tracker = CostTracker(pricing={"m": {"input": 1.0, "output": 2.0}})
    tracker.track_usage("m", 1_000_000, 1_000_000)
    assert tracker.get_total_cost() == pytest.approx(3.0)

    tracker.reset_monthly_costs()

    assert tracker.get_monthly_costs() == {}
    assert tracker.get_token_usage() == {}
