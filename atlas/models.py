"""Database models for the ATLAS engine."""
from __future__ import annotations

from .extensions import db
from .timeutil import isoformat_or_none, utc_now

APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no_show")


class User(db.Model):
    __tablename__ = "users"

    user_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(
        db.Enum(
            "client",
            "business",
            name="user_role",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        server_default="client",
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    business = db.relationship("Business", back_populates="owner", uselist=False)


class Business(db.Model):
    __tablename__ = "businesses"

    business_id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), unique=True, nullable=False)
    name = db.Column(db.String(150), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, server_default="1")
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    owner = db.relationship("User", back_populates="business")
    subscription = db.relationship("Subscription", back_populates="business", uselist=False)


class Subscription(db.Model):
    """Billing state for a business. Written by the billing integration only."""

    __tablename__ = "subscriptions"

    subscription_id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(
        db.Integer, db.ForeignKey("businesses.business_id"), unique=True, nullable=False
    )
    plan_type = db.Column(db.String(50), nullable=False)
    status = db.Column(
        db.Enum(
            "active",
            "trialing",
            "past_due",
            "cancelled",
            "expired",
            name="subscription_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        server_default="trialing",
    )
    current_period_start = db.Column(db.DateTime)
    current_period_end = db.Column(db.DateTime)
    trial_end_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    business = db.relationship("Business", back_populates="subscription")


class Appointment(db.Model):
    """Client bookings. ``scheduled_at`` is an absolute instant in naive UTC."""

    __tablename__ = "appointments"
    __table_args__ = (db.Index("ix_appointments_status_scheduled_at", "status", "scheduled_at"),)

    appointment_id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.business_id"), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=True)
    scheduled_at = db.Column(db.DateTime, nullable=False)
    ends_at = db.Column(db.DateTime)
    status = db.Column(
        db.Enum(
            *APPOINTMENT_STATUSES,
            name="appointment_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        server_default="scheduled",
    )
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    business = db.relationship("Business")
    client = db.relationship("User")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.appointment_id,
            "business_id": self.business_id,
            "client_id": self.client_id,
            "scheduled_at": isoformat_or_none(self.scheduled_at),
            "ends_at": isoformat_or_none(self.ends_at),
            "status": self.status,
            "notes": self.notes,
        }


class ErrorLog(db.Model):
    """Client-side errors reported by the frontend."""

    __tablename__ = "error_logs"

    error_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=True)
    error_message = db.Column(db.String(5000), nullable=False)
    error_stack = db.Column(db.Text)
    error_context = db.Column(db.JSON, nullable=False, default=dict)
    page_url = db.Column(db.String(2000), nullable=False)
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
