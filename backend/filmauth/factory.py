"""Application factory wiring Flask extensions, auth components and blueprints."""

from __future__ import annotations

from flask import Flask

from filmauth.core.config import BaseConfig, get_config
from filmauth.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises InvalidSigningKey: ``JWT_SECRET_KEY`` is missing or too short.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from filmauth.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from filmauth.core import auth

    auth.init_app(app)

    from filmauth.api import authn

    authn.init_app(app)

    from filmauth.api import init_app as init_api

    init_api(app)

    from filmauth.core import errors

    errors.init_app(app)

    from filmauth import cli as app_cli

    app_cli.init_app(app)

    if not app.config.get("TESTING"):
        from filmauth.tasks.cleanup_scheduler import start_cleanup_scheduler

        start_cleanup_scheduler(app)

    return app
