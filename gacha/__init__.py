"""Gacha draw orchestration and pull history service."""

from __future__ import annotations

from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: dict[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: config values applied after the environment config.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from gacha.config import get_config
    from gacha.db import init_db
    from gacha.error_handlers import register_error_handlers
    from gacha.logging_config import configure_logging
    from gacha.routes.draw import draw_bp
    from gacha.routes.health import health_bp
    from gacha.routes.history import history_bp
    from gacha.routes.pools import pools_bp

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(draw_bp, url_prefix="/api/gacha")
    app.register_blueprint(history_bp, url_prefix="/api/gacha")
    app.register_blueprint(pools_bp, url_prefix="/api/gacha")

    return app
