"""pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# Ensure the project root is available on sys.path so tests can import the atlas package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from atlas import create_app  # noqa: E402
from atlas.extensions import db  # noqa: E402
from atlas.identity import issue_token  # noqa: E402
from atlas.models import Appointment, Business, Subscription, User  # noqa: E402
from atlas.timeutil import FixedClock, to_storage  # noqa: E402

SAO_PAULO = ZoneInfo("America/Sao_Paulo")
# 2025-01-15 12:00 in Sao Paulo is 15:00 UTC.
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=SAO_PAULO)
TEST_SECRET = "test-secret-key"


def make_config(**overrides: object) -> dict[str, object]:
    config: dict[str, object] = {
        "TESTING": True,
        "SECRET_KEY": TEST_SECRET,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "BUSINESS_TIMEZONE": "America/Sao_Paulo",
        "SUBSCRIPTION_GRACE_DAYS": 3,
    }
    config.update(overrides)
    return config


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def app(clock):
    flask_app = create_app(make_config(), clock=clock)
    with flask_app.app_context():
        db.create_all()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_business(app):
    """Create an owner, a business and (optionally) its subscription."""
    counter = {"n": 0}

    def _make(
        *,
        plan: str | None = None,
        status: str = "active",
        period_end: datetime | None = None,
        trial_end: datetime | None = None,
    ) -> tuple[int, int]:
        counter["n"] += 1
        with app.app_context():
            user = User(
                name=f"Owner {counter['n']}",
                email=f"owner{counter['n']}@example.com",
                role="business",
            )
            db.session.add(user)
            db.session.flush()

            business = Business(owner_id=user.user_id, name=f"Studio {counter['n']}")
            db.session.add(business)
            db.session.flush()

            if plan is not None:
                db.session.add(
                    Subscription(
                        business_id=business.business_id,
                        plan_type=plan,
                        status=status,
                        current_period_end=to_storage(period_end) if period_end else None,
                        trial_end_date=to_storage(trial_end) if trial_end else None,
                    )
                )
            db.session.commit()
            return user.user_id, business.business_id

    return _make


@pytest.fixture
def add_appointment(app):
    def _add(business_id: int, scheduled_at: datetime, status: str = "scheduled") -> int:
        with app.app_context():
            appointment = Appointment(
                business_id=business_id,
                scheduled_at=to_storage(scheduled_at),
                status=status,
            )
            db.session.add(appointment)
            db.session.commit()
            return appointment.appointment_id

    return _add


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(TEST_SECRET, user_id)}"}

    return _headers
