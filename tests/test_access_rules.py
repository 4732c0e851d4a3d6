"""Tests for the subscription access rule table."""
from __future__ import annotations

from datetime import timedelta

import pytest

from atlas.access import AccessVerdict, days_between, evaluate_subscription
from atlas.errors import RuleEvaluationError
from atlas.timeutil import to_storage
from conftest import NOW


def _evaluate(status, period_end=None, trial_end=None, plan="standard", grace=3):
    return evaluate_subscription(
        plan,
        status,
        period_end,
        trial_end,
        NOW,
        grace_period_days=grace,
    )


def test_active_with_ten_days_left() -> None:
    verdict = _evaluate("active", NOW + timedelta(days=10))

    assert verdict.has_access is True
    assert verdict.days_remaining == 10
    assert verdict.plan == "standard"
    assert verdict.status == "active"
    assert verdict.message is None


def test_days_remaining_rounds_down_partial_days() -> None:
    verdict = _evaluate("active", NOW + timedelta(days=9, hours=23))

    assert verdict.days_remaining == 9


def test_active_without_period_end_has_access() -> None:
    verdict = _evaluate("active")

    assert verdict.has_access is True
    assert verdict.days_remaining == 0


def test_active_with_lapsed_period_is_denied() -> None:
    verdict = _evaluate("active", NOW - timedelta(hours=1))

    assert verdict.has_access is False
    assert verdict.days_remaining == 0
    assert "ended" in verdict.message


def test_expired_subscription_is_denied() -> None:
    verdict = _evaluate("expired", NOW - timedelta(days=5))

    assert verdict.has_access is False
    assert verdict.days_remaining == 0
    assert verdict.message


def test_cancelled_is_denied_even_before_period_end() -> None:
    verdict = _evaluate("cancelled", NOW + timedelta(days=5), plan="professional")

    assert verdict.has_access is False
    assert verdict.days_remaining == 5
    assert "Professional" in verdict.message


def test_trialing_counts_down_to_trial_end() -> None:
    verdict = _evaluate(
        "trialing",
        period_end=NOW + timedelta(days=30),
        trial_end=NOW + timedelta(days=4),
    )

    assert verdict.has_access is True
    assert verdict.days_remaining == 4


def test_trialing_falls_back_to_period_end() -> None:
    verdict = _evaluate("trialing", period_end=NOW + timedelta(days=2))

    assert verdict.has_access is True
    assert verdict.days_remaining == 2


def test_expired_trial_is_denied() -> None:
    verdict = _evaluate("trialing", trial_end=NOW - timedelta(days=1))

    assert verdict.has_access is False
    assert "trial" in verdict.message


def test_past_due_inside_grace_period_keeps_access() -> None:
    verdict = _evaluate("past_due", NOW - timedelta(days=2), grace=3)

    assert verdict.has_access is True
    assert verdict.days_remaining == 0
    assert "1 more day(s)" in verdict.message


def test_past_due_at_grace_boundary_keeps_access() -> None:
    verdict = _evaluate("past_due", NOW - timedelta(days=3), grace=3)

    assert verdict.has_access is True


def test_past_due_after_grace_period_is_denied() -> None:
    verdict = _evaluate("past_due", NOW - timedelta(days=3, seconds=1), grace=3)

    assert verdict.has_access is False


def test_zero_grace_period_denies_past_due_once_period_ends() -> None:
    verdict = _evaluate("past_due", NOW - timedelta(minutes=1), grace=0)

    assert verdict.has_access is False


def test_naive_stored_datetimes_are_read_as_utc() -> None:
    stored = to_storage(NOW + timedelta(days=10))

    verdict = _evaluate("active", stored)

    assert verdict.days_remaining == 10
    assert verdict.to_dict()["current_period_end"] == "2025-01-25T15:00:00+00:00"


def test_unknown_status_raises() -> None:
    with pytest.raises(RuleEvaluationError):
        _evaluate("incomplete", NOW + timedelta(days=1))


def test_unknown_plan_raises() -> None:
    with pytest.raises(RuleEvaluationError):
        _evaluate("active", NOW + timedelta(days=1), plan="enterprise")


def test_same_inputs_give_the_same_verdict() -> None:
    end = NOW + timedelta(days=7)

    assert _evaluate("active", end) == _evaluate("active", end)


def test_no_access_shape() -> None:
    verdict = AccessVerdict.no_access("No business")

    assert verdict.to_dict() == {
        "has_access": False,
        "plan": None,
        "status": None,
        "days_remaining": 0,
        "message": "No business",
        "trial_end_date": None,
        "current_period_end": None,
    }


def test_days_between_never_negative() -> None:
    assert days_between(NOW - timedelta(days=2), NOW) == 0
    assert days_between(None, NOW) == 0
