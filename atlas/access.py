"""Subscription access decisions.

``evaluate_subscription`` is the rule table: a pure function of one
subscription row and an instant. ``AccessEvaluator`` loads the row for a
business and hands it to the rule table.

Denial is data. Every business outcome, including "no business" and
"no subscription", is an ``AccessVerdict`` served with HTTP 200; only
infrastructure faults raise.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import EngineConfig
from .errors import RuleEvaluationError, StoreError
from .models import Business, Subscription
from .plans import DEFAULT_PLANS, SUBSCRIPTION_STATUSES, plan_title
from .timeutil import Clock, from_storage, isoformat_or_none

logger = logging.getLogger(__name__)

NO_BUSINESS_MESSAGE = "No business found for this account. Finish setting up your business to continue."
NO_SUBSCRIPTION_MESSAGE = "No subscription found. Choose a plan to start using all features."


@dataclass(frozen=True)
class AccessVerdict:
    """Gating decision for one business.

    Response schema (always HTTP 200)::

        {
          "has_access": bool,
          "plan": str | null,
          "status": str | null,
          "days_remaining": int,          # >= 0
          "message": str | null,          # set whenever has_access is false
          "trial_end_date": str | null,   # ISO-8601
          "current_period_end": str | null
        }

    Clients must branch on ``has_access``, not on the response status.
    """

    has_access: bool
    plan: str | None
    status: str | None
    days_remaining: int
    message: str | None = None
    trial_end_date: datetime | None = None
    current_period_end: datetime | None = None

    # Verdicts change at day granularity at most.
    max_cache_seconds = 86400

    @classmethod
    def no_access(cls, message: str) -> "AccessVerdict":
        return cls(has_access=False, plan=None, status=None, days_remaining=0, message=message)

    def to_dict(self) -> dict[str, object]:
        return {
            "has_access": self.has_access,
            "plan": self.plan,
            "status": self.status,
            "days_remaining": self.days_remaining,
            "message": self.message,
            "trial_end_date": isoformat_or_none(self.trial_end_date),
            "current_period_end": isoformat_or_none(self.current_period_end),
        }


def days_between(end: datetime | None, now: datetime) -> int:
    """Whole days from ``now`` until ``end``, never negative."""
    if end is None:
        return 0
    return max(0, (end - now).days)


def evaluate_subscription(
    plan: str,
    status: str,
    period_end: datetime | None,
    trial_end: datetime | None,
    now: datetime,
    *,
    grace_period_days: int,
    supported_plans: tuple[str, ...] = DEFAULT_PLANS,
) -> AccessVerdict:
    """Apply the access rules to one subscription row.

    All datetimes must be timezone-aware.
    """
    if status not in SUBSCRIPTION_STATUSES:
        raise RuleEvaluationError(f"Unknown subscription status: {status!r}")
    if plan not in supported_plans:
        raise RuleEvaluationError(f"Unknown plan: {plan!r}")

    period_end = from_storage(period_end)
    trial_end = from_storage(trial_end)
    end = (trial_end or period_end) if status == "trialing" else period_end
    remaining = days_between(end, now)
    title = plan_title(plan)

    def verdict(has_access: bool, message: str | None = None) -> AccessVerdict:
        return AccessVerdict(
            has_access=has_access,
            plan=plan,
            status=status,
            days_remaining=remaining,
            message=message,
            trial_end_date=trial_end,
            current_period_end=period_end,
        )

    if status == "active":
        if period_end is None or period_end >= now:
            return verdict(True)
        return verdict(False, f"Your {title} subscription period has ended. Renew to restore access.")

    if status == "trialing":
        if end is not None and end >= now:
            return verdict(True)
        return verdict(False, "Your free trial has expired. Choose a plan to keep using all features.")

    if status == "past_due":
        if period_end is not None:
            grace_end = period_end + timedelta(days=grace_period_days)
            if now <= grace_end:
                grace_left = days_between(grace_end, now)
                return verdict(
                    True,
                    f"Payment for your {title} subscription is past due. "
                    f"Access continues for {grace_left} more day(s).",
                )
        return verdict(False, "Payment for your subscription is past due. Update your payment method to restore access.")

    if status == "cancelled":
        return verdict(False, f"Your {title} subscription was cancelled. Subscribe again to restore access.")

    return verdict(False, f"Your {title} subscription has expired. Renew to restore access.")


class AccessEvaluator:
    """Load a business's subscription and compute its verdict."""

    def __init__(self, config: EngineConfig, clock: Clock, session: Session) -> None:
        self.config = config
        self.clock = clock
        self.session = session

    def resolve_business(self, user_id: int) -> Business | None:
        try:
            return self.session.query(Business).filter(Business.owner_id == user_id).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Error fetching business: {exc}") from exc

    def evaluate(self, business_id: int | None) -> AccessVerdict:
        if business_id is None:
            return AccessVerdict.no_access(NO_BUSINESS_MESSAGE)

        try:
            subscription = (
                self.session.query(Subscription)
                .filter(Subscription.business_id == business_id)
                .one_or_none()
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Error checking subscription: {exc}") from exc

        if subscription is None:
            logger.info("No subscription for business %s", business_id)
            return AccessVerdict.no_access(NO_SUBSCRIPTION_MESSAGE)

        try:
            return evaluate_subscription(
                subscription.plan_type,
                subscription.status,
                subscription.current_period_end,
                subscription.trial_end_date,
                self.clock.now(),
                grace_period_days=self.config.grace_period_days,
                supported_plans=self.config.supported_plans,
            )
        except RuleEvaluationError:
            raise
        except (TypeError, ValueError) as exc:
            raise RuleEvaluationError(f"Error evaluating subscription: {exc}") from exc

    def evaluate_for_user(self, user_id: int) -> AccessVerdict:
        business = self.resolve_business(user_id)
        return self.evaluate(business.business_id if business else None)
