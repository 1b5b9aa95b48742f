"""Default response middleware: CORS and cache headers.

CORS Policy:
 - Origins come from CORS_ALLOWED_ORIGINS; "*" allows any origin (echoed back).
 - Preflight (OPTIONS + Access-Control-Request-Method) is answered with 204
   before the authorization gate runs, so browsers can discover the API.
 - Requests without an Origin header are untouched.

Caching is disabled for every response that does not set its own policy.
"""

from __future__ import annotations

from flask import Flask, make_response, request
from werkzeug.wrappers.response import Response

ALLOWED_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"


def _origin_allowed(app: Flask, origin: str) -> bool:
    allowed: list[str] = app.config.get("CORS_ALLOWED_ORIGINS", []) or []
    return "*" in allowed or origin in allowed


def _apply_cors(app: Flask, resp: Response) -> Response:
    origin = request.headers.get("Origin")
    if not origin or not _origin_allowed(app, origin):
        return resp
    resp.headers.add("Vary", "Origin")
    resp.headers["Access-Control-Allow-Origin"] = origin
    resp.headers["Access-Control-Allow-Credentials"] = "true"
    return resp


def _preflight(app: Flask) -> Response | None:
    if request.method != "OPTIONS" or not request.headers.get("Access-Control-Request-Method"):
        return None
    resp = make_response("", 204)
    resp.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
    req_hdrs = request.headers.get("Access-Control-Request-Headers")
    if req_hdrs:
        resp.headers["Access-Control-Allow-Headers"] = req_hdrs
        resp.headers.add("Vary", "Access-Control-Request-Headers")
    return resp


def _no_cache(resp: Response) -> Response:
    if "Cache-Control" not in resp.headers:
        resp.headers["Cache-Control"] = "no-cache"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "-1"
    return resp


def init_security(app: Flask) -> None:
    @app.before_request
    def _cors_preflight() -> Response | None:
        return _preflight(app)

    @app.after_request
    def _default_headers(resp: Response) -> Response:
        return _no_cache(_apply_cors(app, resp))


__all__ = ["ALLOWED_METHODS", "init_security"]
