import logging
import os
from collections.abc import Mapping

from flask import Flask

from .engine import init_engine
from .extensions import cors, db
from .routes import bp
from .timeutil import Clock


def create_app(config_object=None, clock: Clock | None = None):
    app = Flask(__name__, instance_relative_config=True)

    app.config.update(
        SECRET_KEY=os.environ.get("SECRET_KEY"),
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///atlas.db"),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )

    # Deployment settings first; an explicit config overrides them key by key.
    app.config.from_envvar("APP_SETTINGS", silent=True)
    if isinstance(config_object, Mapping):
        app.config.from_mapping(config_object)
    elif config_object:
        app.config.from_object(config_object)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])

    state = init_engine(app, clock)
    db.init_app(app)

    # Browser frontend: any origin, fixed header allow-list
    cors.init_app(
        app,
        origins="*",
        send_wildcard=True,
        allow_headers=list(state.config.cors_allow_headers),
        methods=["GET", "POST", "OPTIONS"],
    )

    app.register_blueprint(bp)

    return app
