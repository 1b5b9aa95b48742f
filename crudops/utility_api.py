"""Utility endpoints mounted beside the resource router.

POST /reset         restore the database from the active template
ALL  /status/<code> answer with the requested status code (200-599)
ALL  /delay/<ms>    answer after ceil(ms) milliseconds
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from .bootstrap import load_template
from .errors import BadRequestError
from .pipeline import current_envelope
from .resource_api import get_router

log = logging.getLogger("crudops.utility")

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

INVALID_STATUS_MESSAGE = "Invalid status code. Make sure the status code is between 200 and 599."
INVALID_DELAY_MESSAGE = "Invalid number of milliseconds. Make sure you provide a number greater than 0."

# signed 32-bit millisecond ceiling, about 24.8 days
MAX_DELAY_MS = 2_147_483_647

bp = Blueprint("utility_api", __name__)


def _parse_number(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_status_code(raw: str) -> int:
    value = _parse_number(raw)
    if value is None or not value.is_integer() or not 200 <= value <= 599:
        raise BadRequestError(INVALID_STATUS_MESSAGE)
    return int(value)


def parse_delay(raw: str) -> int:
    """Delay in whole milliseconds (rounded up); must be > 0 and at most MAX_DELAY_MS."""
    value = _parse_number(raw)
    if value is None or value <= 0:
        raise BadRequestError(INVALID_DELAY_MESSAGE)
    if value > MAX_DELAY_MS:
        raise BadRequestError(f"Invalid number of milliseconds. The maximum delay is {MAX_DELAY_MS}.")
    return math.ceil(value)


def _echo() -> dict[str, Any]:
    return {
        "headers": {k.lower(): v for k, v in request.headers.items()},
        "body": current_envelope().body,
    }


@bp.post("/reset")
def reset():
    log.info("Database reset requested - restoring from template")
    cfg = current_app.extensions["crudops"]["config"]
    get_router().replace_state(load_template(cfg))
    return "", 200


@bp.route("/status/<code>", methods=ALL_METHODS, provide_automatic_options=False)
def status(code: str):
    status_code = parse_status_code(code)
    payload = {
        "statusCode": status_code,
        "message": f"Hello! You requested status code {status_code}",
        **_echo(),
    }
    return jsonify(payload), status_code


@bp.route("/delay/<ms>", methods=ALL_METHODS, provide_automatic_options=False)
def delay(ms: str):
    wait_ms = parse_delay(ms)
    # Blocks only this request's worker thread; the server runs threaded.
    time.sleep(wait_ms / 1000)
    payload = {
        "message": f"Response sent after {wait_ms} milliseconds.",
        **_echo(),
    }
    return jsonify(payload), 200


__all__ = [
    "INVALID_DELAY_MESSAGE",
    "INVALID_STATUS_MESSAGE",
    "MAX_DELAY_MS",
    "bp",
    "parse_delay",
    "parse_status_code",
]
