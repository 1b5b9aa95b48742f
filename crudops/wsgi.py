from __future__ import annotations

from dotenv import load_dotenv

from crudops.app_factory import create_app
from crudops.cli import boot, load_config
from crudops.logging_setup import configure_logging

# Expose a module-level WSGI application for Gunicorn (use a threaded worker class)
load_dotenv()
_cfg = load_config()
configure_logging(_cfg.log_level)
boot(_cfg)
app = create_app(_cfg)
