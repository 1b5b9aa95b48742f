"""Process logging configuration and per-request log/timing middleware."""

from __future__ import annotations

import logging
import time
import uuid

from flask import Flask, g, request
from werkzeug.wrappers.response import Response

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # Avoid duplicate attachment if reloaded
    if not any(getattr(h, "_crudops", False) for h in root.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        h._crudops = True  # type: ignore[attr-defined]
        root.addHandler(h)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def install_request_logging(app: Flask) -> None:
    log = logging.getLogger("crudops.request")

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Response-Time"] = f"{dur_ms}ms"
        log.info(
            {
                "request_id": rid,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp


__all__ = ["LOG_FORMAT", "configure_logging", "install_request_logging"]
