"""Utility to seed or update a business subscription for local development."""
from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Ensure the project root is on sys.path so ``atlas`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from atlas import create_app
from atlas.engine import engine_state
from atlas.extensions import db
from atlas.identity import issue_token
from atlas.models import Business, Subscription, User
from atlas.plans import SUBSCRIPTION_STATUSES
from atlas.timeutil import to_storage, utc_now


def set_subscription(email: str, plan: str, status: str, days: int) -> bool:
    app = create_app()

    if status not in SUBSCRIPTION_STATUSES:
        print(f"Error: Invalid status '{status}'. Valid statuses are: {', '.join(SUBSCRIPTION_STATUSES)}")
        return False

    with app.app_context():
        supported_plans = engine_state().config.supported_plans
        if plan not in supported_plans:
            print(f"Error: Invalid plan '{plan}'. Valid plans are: {', '.join(supported_plans)}")
            return False

        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(name="Business Owner", email=email, role="business")
            db.session.add(user)
            db.session.flush()
            print(f"Created new business user: {email}")

        business = Business.query.filter_by(owner_id=user.user_id).first()
        if business is None:
            business = Business(owner_id=user.user_id, name=f"{user.name}'s business")
            db.session.add(business)
            db.session.flush()
            print(f"Created business for user: {email}")

        now = utc_now()
        period_end = to_storage(now + timedelta(days=days))
        subscription = Subscription.query.filter_by(business_id=business.business_id).first()
        if subscription is None:
            subscription = Subscription(business_id=business.business_id, plan_type=plan)
            db.session.add(subscription)

        subscription.plan_type = plan
        subscription.status = status
        subscription.current_period_start = to_storage(now)
        subscription.current_period_end = period_end
        subscription.trial_end_date = period_end if status == "trialing" else None
        db.session.commit()

        print(f"Subscription for '{email}' set to {plan}/{status}, ends {period_end:%Y-%m-%d %H:%M} UTC.")
        if app.config.get("SECRET_KEY"):
            print(f"Bearer token: {issue_token(app.config['SECRET_KEY'], user.user_id)}")
        return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a business subscription.")
    parser.add_argument("email", help="Business owner's email")
    parser.add_argument("--plan", default="standard", help="Plan tier; must be one of SUBSCRIPTION_PLANS")
    parser.add_argument("--status", default="trialing", choices=SUBSCRIPTION_STATUSES)
    parser.add_argument("--days", type=int, default=14, help="Days until the period ends (negative for past)")
    args = parser.parse_args()

    sys.exit(0 if set_subscription(args.email, args.plan, args.status, args.days) else 1)
