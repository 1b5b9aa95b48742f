"""Startup gate and database bootstrap.

Runs once per process, before any listener binds:
 - check_preconditions: TEMPLATE and API_KEY present, template file exists.
 - ensure_database: first boot copies the template bytes to the database file;
   later boots leave the existing file (and its modifications) alone.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from typing import Any

from .config import Config, StartupError

log = logging.getLogger("crudops.bootstrap")


def check_preconditions(cfg: Config) -> None:
    if not cfg.template_name:
        raise StartupError(
            "you must specify the template to use in an environment variable called TEMPLATE. "
            "See the documentation for more info."
        )
    if not cfg.api_key:
        raise StartupError(
            "you must specify the API key to use in an environment variable called API_KEY. "
            "See the documentation for more info."
        )
    if not os.path.isfile(cfg.template_path):
        raise StartupError(
            f"the given template ({cfg.template_name}) is not in the {cfg.templates_dir} directory. "
            'Make sure you only give the file name to use, for example "testdata.json".'
        )


def ensure_database(cfg: Config) -> bool:
    """Copy the template to the database path if no database exists yet.

    The copy is byte-for-byte; JSON validity is only checked when the store
    loads the file. Returns True when a new database file was written.
    """
    if os.path.exists(cfg.database_path):
        return False
    log.info("Database file %s does not exist - copying from template %s", cfg.database_path, cfg.template_name)
    parent = os.path.dirname(os.path.abspath(cfg.database_path))
    os.makedirs(parent, exist_ok=True)
    shutil.copyfile(cfg.template_path, cfg.database_path)
    return True


def load_template(cfg: Config) -> Any:
    # Read errors and malformed JSON propagate to the caller.
    with open(cfg.template_path, encoding="utf-8") as fh:
        return json.load(fh)


def prepare(cfg: Config) -> None:
    check_preconditions(cfg)
    ensure_database(cfg)


__all__ = ["StartupError", "check_preconditions", "ensure_database", "load_template", "prepare"]
