"""Tests for the command-line entry points under scripts/."""
from __future__ import annotations

import importlib.util
from datetime import datetime

from atlas import create_app
from atlas.extensions import db
from atlas.models import Appointment, Subscription
from conftest import PROJECT_ROOT


def _load_script(name: str):
    path = PROJECT_ROOT / "scripts" / f"{name}.py"
    loader_spec = importlib.util.spec_from_file_location(f"atlas_scripts_{name}", path)
    module = importlib.util.module_from_spec(loader_spec)
    loader_spec.loader.exec_module(module)
    return module


def _use_settings_file(tmp_path, monkeypatch, db_name: str) -> None:
    settings = tmp_path / "settings.cfg"
    settings.write_text(
        f'SQLALCHEMY_DATABASE_URI = "sqlite:///{tmp_path / db_name}"\n'
        'SECRET_KEY = "script-secret"\n'
    )
    monkeypatch.setenv("APP_SETTINGS", str(settings))


def test_timezone_override_keeps_the_configured_store(tmp_path, monkeypatch, capsys) -> None:
    _use_settings_file(tmp_path, monkeypatch, "cron.db")
    seed = create_app()
    with seed.app_context():
        db.create_all()
        appointment = Appointment(business_id=1, scheduled_at=datetime(2020, 1, 1, 12, 0))
        db.session.add(appointment)
        db.session.commit()
        appointment_id = appointment.appointment_id

    exit_code = _load_script("complete_appointments").run_sweep("America/Sao_Paulo")

    assert exit_code == 0
    assert "Completed 1 past appointment(s)." in capsys.readouterr().out
    with seed.app_context():
        assert db.session.get(Appointment, appointment_id).status == "completed"


def test_timezone_override_applies_on_top_of_settings(tmp_path, monkeypatch) -> None:
    _use_settings_file(tmp_path, monkeypatch, "overlay.db")

    app = create_app({"BUSINESS_TIMEZONE": "UTC"})

    assert app.config["SQLALCHEMY_DATABASE_URI"].endswith("overlay.db")
    assert app.config["SECRET_KEY"] == "script-secret"
    assert app.extensions["atlas"].config.business_timezone == "UTC"


def test_seeding_rejects_unsupported_plan(tmp_path, monkeypatch, capsys) -> None:
    _use_settings_file(tmp_path, monkeypatch, "seed.db")
    seed = create_app()
    with seed.app_context():
        db.create_all()

    stored = _load_script("set_subscription").set_subscription("owner@example.com", "enterprise", "active", 14)

    assert stored is False
    assert "Invalid plan 'enterprise'" in capsys.readouterr().out
    with seed.app_context():
        assert Subscription.query.count() == 0


def test_seeding_writes_supported_plan(tmp_path, monkeypatch, capsys) -> None:
    _use_settings_file(tmp_path, monkeypatch, "seed.db")
    seed = create_app()
    with seed.app_context():
        db.create_all()

    stored = _load_script("set_subscription").set_subscription("owner@example.com", "professional", "active", 14)

    assert stored is True
    assert "Bearer token:" in capsys.readouterr().out
    with seed.app_context():
        subscription = Subscription.query.one()
        assert subscription.plan_type == "professional"
        assert subscription.status == "active"
