"""Request pipeline stages run ahead of every route.

Order (registered by ``install_pipeline``):
 1. parse_body      - request body -> RequestEnvelope on ``g.envelope``
 2. authorize       - non-GET requests need ``Authorization: Bearer <API_KEY>``
 3. stamp_created   - POST: created + updated set to now
 4. stamp_updated   - PUT/PATCH: updated set to now

A stage returning a response short-circuits the request; the others return None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from flask import Flask, g, request
from werkzeug.exceptions import BadRequest
from werkzeug.wrappers.response import Response

from .config import Config
from .http_errors import unauthorized

UNAUTHORIZED_MESSAGE = "Unauthorized - did you forget the API key?"

_FORM_MIMETYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC instant with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RequestEnvelope:
    body: Any = field(default_factory=dict)

    @property
    def is_record(self) -> bool:
        return isinstance(self.body, dict)

    def stamp_created(self, ts: str) -> None:
        if self.is_record:
            self.body["created"] = ts
            self.body["updated"] = ts

    def stamp_updated(self, ts: str) -> None:
        if self.is_record:
            self.body["updated"] = ts


def current_envelope() -> RequestEnvelope:
    env = getattr(g, "envelope", None)
    if env is None:
        env = g.envelope = RequestEnvelope()
    return env


def parse_body() -> None:
    if request.mimetype in _FORM_MIMETYPES:
        g.envelope = RequestEnvelope(request.form.to_dict())
        return None
    raw = request.get_data(cache=True)
    if not raw.strip():
        g.envelope = RequestEnvelope()
        return None
    if not request.is_json:
        # Unknown content types are ignored
        g.envelope = RequestEnvelope()
        return None
    try:
        body = request.get_json(force=True)
    except BadRequest as ex:
        raise BadRequest("Request body is not valid JSON.") from ex
    g.envelope = RequestEnvelope(body)
    return None


def make_authorize(cfg: Config):
    expected = f"Bearer {cfg.api_key}"

    def authorize() -> Response | None:
        if request.method == "GET":
            return None
        if request.headers.get("Authorization") == expected:
            return None
        return unauthorized(UNAUTHORIZED_MESSAGE, www_auth="Bearer")

    return authorize


def stamp_created() -> None:
    if request.method == "POST":
        current_envelope().stamp_created(utc_timestamp())


def stamp_updated() -> None:
    if request.method in ("PUT", "PATCH"):
        current_envelope().stamp_updated(utc_timestamp())


def install_pipeline(app: Flask, cfg: Config) -> None:
    app.before_request(parse_body)
    app.before_request(make_authorize(cfg))
    app.before_request(stamp_created)
    app.before_request(stamp_updated)


__all__ = [
    "RequestEnvelope",
    "UNAUTHORIZED_MESSAGE",
    "current_envelope",
    "install_pipeline",
    "make_authorize",
    "parse_body",
    "stamp_created",
    "stamp_updated",
    "utc_timestamp",
]
