"""Flask application factory and bootstrap.

This module provides the create_app() factory function exposing the users
store over a JSON API. One process holds exactly one store; serve it with a
single worker (see gunicorn.conf.py).
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask

from usermirror.config import AppConfig, load_settings
from usermirror.core.gorest import build_gateway
from usermirror.core.user_store import UserCollectionStore


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(store: Optional[UserCollectionStore] = None, cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        store: Pre-built store (tests); otherwise one is built and loaded
        cfg: Settings (loaded from the environment when omitted)
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg

    _configure_logging(app, cfg.log_level)

    if store is None:
        store = UserCollectionStore(build_gateway(cfg), operator=cfg.audit_operator)
        result = store.initialize()
        if not result.ok:
            app.logger.error(f"Initial users load failed: {result.message}")
    app.extensions["user_store"] = store

    # Register blueprints
    from usermirror.api import errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp, url_prefix="/api")

    # Register error handlers
    errors.register_error_handlers(app)

    print(f"[flask_app] Users API registered at /api (remote={cfg.api_base_url})")
    if not cfg.has_api_token:
        print("[flask_app] WARNING: no API token configured - mutations will be rejected remotely")

    return app


def _configure_logging(app: Flask, level_name: str) -> None:
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger("usermirror").setLevel(level)
    app.logger.setLevel(level)


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=True, threaded=False)
