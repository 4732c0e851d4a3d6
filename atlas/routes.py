"""HTTP routes for the ATLAS engine."""
from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError

from .engine import access_evaluator, completion_sweeper, engine_state, error_log_sink
from .errors import EngineError
from .extensions import db
from .guards import current_user_id, subscription_required
from .models import APPOINTMENT_STATUSES, Appointment
from .tracing import log_failure, log_step

bp = Blueprint("api", __name__)


def _preflight() -> tuple[str, int]:
    # CORS headers are added by flask-cors.
    return "", 200


@bp.get("/health")
def health_check() -> tuple[dict[str, str], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
    """
    return jsonify({"status": "ok"}), 200


@bp.get("/db-health")
def database_health() -> tuple[dict[str, str], int]:
    """Check connectivity to the configured database.
    ---
    tags:
      - Health
    responses:
      200:
        description: Database connection is ok.
      500:
        description: Database connection failed.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


@bp.route("/functions/complete-appointments", methods=["POST", "OPTIONS"])
def complete_appointments():
    """Complete every scheduled appointment whose time has passed.
    ---
    tags:
      - Lifecycle
    responses:
      200:
        description: Sweep finished; returns the number of completed appointments.
        schema:
          type: object
          properties:
            success:
              type: boolean
            message:
              type: string
            timestamp:
              type: string
              example: "2025-01-15 12:00:00"
            completed:
              type: integer
      500:
        description: The store rejected the batch update.
    """
    if request.method == "OPTIONS":
        return _preflight()

    try:
        result = completion_sweeper().sweep()
    except EngineError as exc:
        log_failure(current_app.logger, "COMPLETE-APPOINTMENTS", "ERROR in complete-appointments", exc)
        return jsonify({"error": str(exc)}), 500

    log_step(
        current_app.logger,
        "COMPLETE-APPOINTMENTS",
        "Sweep finished",
        {"completed": result.completed_count, "timestamp": result.timestamp},
    )
    return jsonify(result.to_dict()), 200


@bp.route("/functions/check-subscription", methods=["GET", "POST", "OPTIONS"])
def check_subscription():
    """Return the access verdict for the caller's business.
    ---
    tags:
      - Subscriptions
    parameters:
      - name: Authorization
        in: header
        type: string
        required: true
        description: Bearer token of the business owner.
    responses:
      200:
        description: >
          Access verdict. Denials (no business, no subscription, expired or
          cancelled plan) are also 200 with has_access=false.
        schema:
          type: object
          properties:
            has_access:
              type: boolean
            plan:
              type: string
            status:
              type: string
            days_remaining:
              type: integer
            message:
              type: string
      500:
        description: Missing or invalid credential, or the store is unreachable.
    """
    if request.method == "OPTIONS":
        return _preflight()

    logger = current_app.logger
    tag = "CHECK-SUBSCRIPTION"
    try:
        log_step(logger, tag, "Function started")
        user_id = current_user_id()
        log_step(logger, tag, "User authenticated", {"userId": user_id})

        evaluator = access_evaluator()
        business = evaluator.resolve_business(user_id)
        if business is None:
            log_step(logger, tag, "No business found for user")
            verdict = evaluator.evaluate(None)
        else:
            log_step(logger, tag, "Business found", {"businessId": business.business_id})
            verdict = evaluator.evaluate(business.business_id)
    except EngineError as exc:
        log_failure(logger, tag, "ERROR in check-subscription", exc)
        return jsonify({"error": str(exc)}), 500

    log_step(logger, tag, "Subscription checked", verdict.to_dict())
    return jsonify(verdict.to_dict()), 200


@bp.route("/functions/log-error", methods=["POST", "OPTIONS"])
def log_error():
    """Store a client-side error report. Always answers 200.
    ---
    tags:
      - Operations
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            error_message:
              type: string
            error_stack:
              type: string
            error_context:
              type: object
            page_url:
              type: string
            user_agent:
              type: string
          required:
            - error_message
            - page_url
    responses:
      200:
        description: >
          Always 200 so the reporting page is never interrupted. success is
          false when the report was malformed or the insert failed; clients
          may ignore it.
    """
    if request.method == "OPTIONS":
        return _preflight()

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    error_message = payload.get("error_message")
    page_url = payload.get("page_url")
    if not isinstance(error_message, str) or not isinstance(page_url, str):
        current_app.logger.warning("Rejected malformed client error report")
        return jsonify({"success": False}), 200

    user_id = None
    if request.headers.get("Authorization"):
        try:
            user_id = current_user_id()
        except EngineError:
            # Reporting works anonymously too.
            user_id = None

    context = payload.get("error_context")
    stored = error_log_sink().record(
        error_message,
        page_url,
        error_stack=payload.get("error_stack") if isinstance(payload.get("error_stack"), str) else None,
        error_context=context if isinstance(context, dict) else {},
        user_agent=payload.get("user_agent") if isinstance(payload.get("user_agent"), str) else None,
        user_id=user_id,
    )
    return jsonify({"success": stored}), 200


@bp.get("/business/appointments")
@subscription_required()
def list_business_appointments() -> tuple[dict[str, object], int]:
    """List the caller's appointments, optionally filtered by status.
    ---
    tags:
      - Appointments
    parameters:
      - name: status
        in: query
        type: string
        enum: [scheduled, completed, cancelled, no_show]
    responses:
      200:
        description: Appointments ordered by scheduled time.
      402:
        description: The business has no subscription access.
    """
    status = (request.args.get("status") or "").strip()
    if status and status not in APPOINTMENT_STATUSES:
        return (
            jsonify({
                "error": "invalid_status",
                "message": f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}",
            }),
            400,
        )

    try:
        query = Appointment.query.filter(Appointment.business_id == g.business_id)
        if status:
            query = query.filter(Appointment.status == status)
        appointments = query.order_by(Appointment.scheduled_at.asc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch appointments", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({
        "appointments": [a.to_dict() for a in appointments],
        "subscription": g.access_verdict.to_dict(),
    }), 200


@bp.get("/business/appointments/summary")
@subscription_required(required_plan="professional")
def appointment_summary() -> tuple[dict[str, object], int]:
    """Count the caller's appointments per status (Professional plan).
    ---
    tags:
      - Appointments
    responses:
      200:
        description: Counts keyed by status.
      402:
        description: The business has no subscription access.
      403:
        description: The current plan does not include this module.
    """
    try:
        rows = (
            db.session.query(Appointment.status, func.count(Appointment.appointment_id))
            .filter(Appointment.business_id == g.business_id)
            .group_by(Appointment.status)
            .all()
        )
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to summarize appointments", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    counts = {status: 0 for status in APPOINTMENT_STATUSES}
    counts.update({status: total for status, total in rows})
    return jsonify({
        "business_id": g.business_id,
        "timezone": engine_state().config.business_timezone,
        "counts": counts,
        "total": sum(counts.values()),
    }), 200
