"""Development server for the ATLAS engine."""
from __future__ import annotations

import os

from atlas import create_app
from atlas.engine import engine_state
from atlas.extensions import db


def main() -> None:
    flask_app = create_app()

    with flask_app.app_context():
        if os.environ.get("AUTO_CREATE_TABLES", "1") in {"1", "true", "True"}:
            db.create_all()
        config = engine_state().config
        print(
            f"Business timezone: {config.business_timezone} | "
            f"grace period: {config.grace_period_days} day(s) | "
            f"plans: {', '.join(config.supported_plans)}"
        )

    for rule in sorted(flask_app.url_map.iter_rules(), key=lambda r: r.rule):
        print(f"  {','.join(sorted(rule.methods - {'HEAD'}))} {rule.rule}")

    debug_enabled = os.environ.get("FLASK_DEBUG", "0") in {"1", "true", "True"}
    flask_app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)), debug=debug_enabled)


if __name__ == "__main__":
    main()
