from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from dotenv import load_dotenv

from crudops import __version__
from crudops.app_factory import create_app
from crudops.bootstrap import prepare
from crudops.config import Config, StartupError
from crudops.logging_setup import configure_logging

log = logging.getLogger("crudops")


def mask_secret(value: str) -> str:
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


def _fatal(err: StartupError) -> NoReturn:
    print(f"Fatal error: {err}", file=sys.stderr)
    log.error("Startup aborted: %s", err)
    sys.exit(1)


def load_config() -> Config:
    """Config from the environment; exit the process with status 1 if it is unusable."""
    try:
        return Config.from_env()
    except StartupError as e:
        _fatal(e)


def boot(cfg: Config) -> None:
    """Run the startup gate; exit the process with status 1 on failure."""
    try:
        prepare(cfg)
    except StartupError as e:
        _fatal(e)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="crudops", description="Mock CRUD server backed by a JSON file")
    ap.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    ap.add_argument("--port", type=int, help="Port (default: PORT or 3000)")
    ap.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    return ap


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    load_dotenv()
    cfg = load_config().override({k: v for k, v in {"host": args.host, "port": args.port}.items() if v is not None})
    configure_logging(cfg.log_level)
    print(f"crudops version {__version__}\n")
    boot(cfg)
    app = create_app(cfg)
    print(
        f"Starting the API.\n\nPort: {cfg.port}\nTemplate: {cfg.template_name}\n"
        f"API key: {mask_secret(cfg.api_key)}\n"
    )
    app.run(host=cfg.host, port=cfg.port, debug=args.debug, threaded=True)


__all__ = ["boot", "build_parser", "load_config", "main", "mask_secret"]
