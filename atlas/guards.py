"""Subscription gating for feature endpoints."""
from __future__ import annotations

from functools import wraps

from flask import current_app, g, jsonify, request

from .engine import access_evaluator, engine_state
from .errors import EngineError
from .identity import resolve_user_id
from .plans import plan_allows, plan_title


def current_user_id() -> int:
    """Resolve the caller from the Authorization header or raise AuthenticationError."""
    return resolve_user_id(
        request.headers.get("Authorization"),
        current_app.config.get("SECRET_KEY"),
        engine_state().config.token_max_age,
    )


def subscription_required(required_plan: str | None = None):
    """Only run the view when the caller's business has access.

    No access -> 402 with the verdict; plan below ``required_plan`` -> 403.
    The verdict and business id are kept on ``g`` for the view.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                user_id = current_user_id()
                evaluator = access_evaluator()
                business = evaluator.resolve_business(user_id)
                verdict = evaluator.evaluate(business.business_id if business else None)
            except EngineError as exc:
                current_app.logger.error("Subscription check failed: %s", exc)
                return jsonify({"error": str(exc)}), 500

            if not verdict.has_access:
                return jsonify({"error": "subscription_required", **verdict.to_dict()}), 402

            supported = engine_state().config.supported_plans
            if not plan_allows(verdict.plan, required_plan, supported):
                return (
                    jsonify(
                        {
                            "error": "plan_restricted",
                            "message": f"This module is only available on the {plan_title(required_plan)} plan.",
                            "plan": verdict.plan,
                            "required_plan": required_plan,
                        }
                    ),
                    403,
                )

            g.access_verdict = verdict
            g.business_id = business.business_id
            return view(*args, **kwargs)

        return wrapper

    return decorator
