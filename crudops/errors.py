"""Domain errors + JSON envelope handler registration."""
from __future__ import annotations

import traceback
import uuid
from collections.abc import Callable
from typing import Any

from flask import request
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from .http_errors import (
    bad_request,
    conflict,
    internal_server_error,
    method_not_allowed,
    not_found,
    problem,
    unauthorized,
)


class DomainError(Exception):
    status = 400
    code = "bad_request"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.code
        self.extra = extra
        super().__init__(self.message)


class BadRequestError(DomainError):
    status = 400
    code = "bad_request"


class NotFoundError(DomainError):
    status = 404
    code = "not_found"


class ConflictError(DomainError):
    status = 409
    code = "conflict"


_STATUS_HELPERS: dict[int, Callable[..., Response]] = {
    400: bad_request,
    401: unauthorized,
    404: not_found,
    405: method_not_allowed,
    409: conflict,
}


def register_error_handlers(app: Any) -> None:
    @app.errorhandler(DomainError)
    def _h_domain(err: DomainError) -> Response:
        helper = _STATUS_HELPERS.get(err.status)
        if helper:
            return helper(err.message, **err.extra)
        return problem(err.status, err.code, err.message, **err.extra)

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Response:
        status = ex.code or 500
        helper = _STATUS_HELPERS.get(status)
        if helper:
            resp = helper(str(ex.description))
        elif status >= 500:
            resp = internal_server_error()
        else:
            resp = problem(status, ex.name.lower().replace(" ", "_"), str(ex.description))
        if status == 405 and hasattr(ex, "valid_methods") and ex.valid_methods:
            resp.headers["Allow"] = ", ".join(ex.valid_methods)
        return resp

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        app.logger.error(
            "Unhandled exception incident_id=%s path=%s\n%s", incident_id, request.path, traceback.format_exc()
        )
        return internal_server_error(incident_id=incident_id)


__all__ = ["DomainError", "BadRequestError", "NotFoundError", "ConflictError", "register_error_handlers"]
