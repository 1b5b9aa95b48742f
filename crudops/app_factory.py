"""Flask application factory.

Assembles the request pipeline in a fixed order:
 - default middleware (request id + timing log, CORS preflight, cache headers)
 - body parsing, authorization gate, created/updated stamping
 - utility endpoints (reset, status, delay) under the mount path
 - generic resource router under the mount path (registered last)
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask

from .config import Config
from .errors import register_error_handlers
from .json_db import JsonDatabase
from .logging_setup import install_request_logging
from .pipeline import install_pipeline
from .resource_api import JsonResourceRouter, bp as resource_bp
from .security import init_security
from .utility_api import bp as utility_bp

log = logging.getLogger("crudops")


def create_app(cfg: Config | None = None, config_override: dict[str, Any] | None = None) -> Flask:
    """Build the app around an already bootstrapped database file.

    ``cfg`` defaults to ``Config.from_env()``; ``config_override`` may hold
    Config field names (lower case) and Flask config keys (upper case).
    """
    app = Flask(__name__)
    # --- Configuration ---
    cfg = cfg or Config.from_env()
    if config_override:
        cfg = cfg.override(config_override)
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v
    app.config.update(cfg.to_flask_dict())
    app.json.sort_keys = False  # type: ignore[attr-defined]

    # --- Store + router ---
    db = JsonDatabase(cfg.database_path)
    router = JsonResourceRouter(db)
    app.extensions["crudops"] = {"config": cfg, "db": db, "router": router}

    # --- Pipeline (order matters) ---
    install_request_logging(app)
    init_security(app)
    install_pipeline(app, cfg)
    register_error_handlers(app)

    # --- Routes: utility endpoints take precedence over the generic router ---
    prefix = cfg.mount_path.rstrip("/")
    app.register_blueprint(utility_bp, url_prefix=prefix)
    app.register_blueprint(resource_bp, url_prefix=prefix)

    log.info("App created: mount=%s database=%s template=%s", cfg.mount_path, cfg.database_path, cfg.template_name)
    return app


__all__ = ["create_app"]
