"""Plan tiers and subscription statuses."""
from __future__ import annotations

from typing import Final

# Lowest tier first; deployments may override via SUBSCRIPTION_PLANS.
DEFAULT_PLANS: Final[tuple[str, ...]] = ("standard", "professional")

PLAN_TITLES: Final[dict[str, str]] = {
    "standard": "Standard",
    "professional": "Professional",
}

SUBSCRIPTION_STATUSES: Final[tuple[str, ...]] = (
    "active",
    "trialing",
    "past_due",
    "cancelled",
    "expired",
)


def plan_title(plan: str | None) -> str:
    if not plan:
        return "No plan"
    return PLAN_TITLES.get(plan, plan.replace("_", " ").title())


def plan_allows(
    plan: str | None,
    required_plan: str | None,
    supported_plans: tuple[str, ...] = DEFAULT_PLANS,
) -> bool:
    """Return True when ``plan`` ranks at or above ``required_plan``.

    Unknown plans never satisfy a requirement.
    """
    if required_plan is None:
        return True
    if plan not in supported_plans or required_plan not in supported_plans:
        return False
    return supported_plans.index(plan) >= supported_plans.index(required_plan)
