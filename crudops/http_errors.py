"""Shared JSON error envelope helpers for consistent error responses."""
from __future__ import annotations

import uuid

from flask import g, jsonify
from werkzeug.wrappers.response import Response


def problem(status: int, error: str, message: str, **extra: object) -> Response:
    payload: dict[str, object] = {
        "error": error,
        "message": message,
        "status": status,
    }
    rid = getattr(g, "request_id", None)
    if rid:
        payload["request_id"] = rid
    for k, v in extra.items():
        if v is not None:
            payload[k] = v
    resp = jsonify(payload)
    resp.status_code = status
    # Always echo request id header when available
    if rid and "X-Request-Id" not in resp.headers:
        resp.headers["X-Request-Id"] = rid
    return resp


def bad_request(message: str = "bad_request", **extra: object) -> Response:
    return problem(400, "bad_request", message, **extra)


def unauthorized(message: str = "unauthorized", www_auth: str | None = None, **extra: object) -> Response:
    resp = problem(401, "unauthorized", message, **extra)
    if www_auth:
        resp.headers["WWW-Authenticate"] = www_auth
    return resp


def not_found(message: str = "not_found", **extra: object) -> Response:
    return problem(404, "not_found", message, **extra)


def method_not_allowed(message: str = "method_not_allowed", **extra: object) -> Response:
    return problem(405, "method_not_allowed", message, **extra)


def conflict(message: str = "conflict", **extra: object) -> Response:
    return problem(409, "conflict", message, **extra)


def internal_server_error(message: str = "internal_error", incident_id: str | None = None, **extra: object) -> Response:
    if not incident_id:
        incident_id = str(uuid.uuid4())
    return problem(500, "internal_error", message, incident_id=incident_id, **extra)


__all__ = [
    "problem", "bad_request", "unauthorized", "not_found", "method_not_allowed", "conflict", "internal_server_error"
]
