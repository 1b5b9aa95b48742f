"""Generic REST router over the JSON document store.

Every top-level key of the document is a resource:
 - list value   -> collection: GET/POST on /<name>, GET/PUT/PATCH/DELETE on /<name>/<id>
 - object value -> singular resource: GET/PUT/PATCH on /<name>
 - other values -> read-only: GET on /<name>

The Flask blueprint is a thin adapter; ``JsonResourceRouter.handle`` holds the
routing so it can be exercised without HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from flask import Blueprint, current_app, jsonify, request
from werkzeug.datastructures import MultiDict

from .errors import BadRequestError, ConflictError, NotFoundError
from .json_db import JsonDatabase, find_index, next_id
from .pipeline import current_envelope


@dataclass
class RouterResponse:
    status: int
    payload: Any


class ResourceRouter(Protocol):
    def handle(self, method: str, path: str, query: MultiDict, body: Any) -> RouterResponse: ...

    def replace_state(self, document: dict[str, Any]) -> None: ...


def _split(path: str) -> list[str]:
    return [p for p in path.strip("/").split("/") if p]


def _matches(record: Any, filters: dict[str, list[str]]) -> bool:
    if not isinstance(record, dict):
        return False
    for key, wanted in filters.items():
        if key not in record:
            return False
        value = record[key]
        if isinstance(value, bool):
            value = "true" if value else "false"
        if str(value) not in wanted:
            return False
    return True


def _require_record(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object.")
    return body


def _resource(state: dict[str, Any], name: str) -> Any:
    if name not in state:
        raise NotFoundError(f"Resource '{name}' does not exist.")
    return state[name]


def _collection(state: dict[str, Any], name: str) -> list[Any]:
    value = _resource(state, name)
    if not isinstance(value, list):
        raise NotFoundError(f"'{name}' is not a collection.")
    return value


def _merge(method: str, current: Any, body: dict[str, Any]) -> dict[str, Any]:
    new = {**current, **body} if method == "PATCH" and isinstance(current, dict) else dict(body)
    # created belongs to the first write; clients cannot change it
    if isinstance(current, dict) and "created" in current:
        new["created"] = current["created"]
    else:
        new.pop("created", None)
    return new


class JsonResourceRouter:
    def __init__(self, db: JsonDatabase):
        self.db = db

    def replace_state(self, document: dict[str, Any]) -> None:
        self.db.set_state(document)

    def handle(self, method: str, path: str, query: MultiDict, body: Any) -> RouterResponse:
        method = method.upper()
        parts = _split(path)
        if len(parts) == 1:
            return self._on_resource(method, parts[0], query, body)
        if len(parts) == 2:
            return self._on_item(method, parts[0], parts[1], body)
        raise NotFoundError(f"No route for /{path.strip('/')}.")

    def _on_resource(self, method: str, name: str, query: MultiDict, body: Any) -> RouterResponse:
        if method == "GET":
            filters = {k: query.getlist(k) for k in query if not k.startswith("_")}

            def _get(s: dict[str, Any]) -> Any:
                value = _resource(s, name)
                if isinstance(value, list) and filters:
                    return [r for r in value if _matches(r, filters)]
                return value

            return RouterResponse(200, self.db.read(_get))
        if method == "POST":
            record = _require_record(body)

            def _add(s: dict[str, Any]) -> dict[str, Any]:
                records = _collection(s, name)
                new = dict(record)
                if new.get("id") is None:
                    new["id"] = next_id(records)
                elif find_index(records, str(new["id"])) is not None:
                    raise ConflictError(f"A record with id {new['id']} already exists in '{name}'.")
                records.append(new)
                return new

            return RouterResponse(201, self.db.mutate(_add))
        if method in ("PUT", "PATCH"):
            record = _require_record(body)

            def _update(s: dict[str, Any]) -> dict[str, Any]:
                current = _resource(s, name)
                if not isinstance(current, dict):
                    raise NotFoundError(f"{method} is not supported on '{name}'.")
                s[name] = _merge(method, current, record)
                return s[name]

            return RouterResponse(200, self.db.mutate(_update))
        raise NotFoundError(f"{method} is not supported on '{name}'.")

    def _on_item(self, method: str, name: str, record_id: str, body: Any) -> RouterResponse:
        def _locate(s: dict[str, Any]) -> tuple[list[Any], int]:
            records = _collection(s, name)
            idx = find_index(records, record_id)
            if idx is None:
                raise NotFoundError(f"No record with id {record_id} in '{name}'.")
            return records, idx

        if method == "GET":

            def _get(s: dict[str, Any]) -> Any:
                records, idx = _locate(s)
                return records[idx]

            return RouterResponse(200, self.db.read(_get))
        if method in ("PUT", "PATCH"):
            record = _require_record(body)

            def _update(s: dict[str, Any]) -> dict[str, Any]:
                records, idx = _locate(s)
                current = records[idx]
                new = _merge(method, current, record)
                new["id"] = current["id"]
                records[idx] = new
                return new

            return RouterResponse(200, self.db.mutate(_update))
        if method == "DELETE":

            def _delete(s: dict[str, Any]) -> dict[str, Any]:
                records, idx = _locate(s)
                del records[idx]
                return {}

            return RouterResponse(200, self.db.mutate(_delete))
        raise NotFoundError(f"{method} is not supported on '{name}/{record_id}'.")


def get_router() -> ResourceRouter:
    return current_app.extensions["crudops"]["router"]


bp = Blueprint("resource_api", __name__)


@bp.route("/<path:resource_path>", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
def dispatch(resource_path: str):
    result = get_router().handle(request.method, resource_path, request.args, current_envelope().body)
    return jsonify(result.payload), result.status


__all__ = ["JsonResourceRouter", "ResourceRouter", "RouterResponse", "bp", "get_router"]
