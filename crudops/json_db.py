"""JSON document store backed by a single file.

The whole document lives in memory; every mutation is written back to disk
(temp file + os.replace). A single re-entrant lock serialises access so a
request never observes a half-applied change.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class JsonDatabase:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self._state: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        with open(self.path, encoding="utf-8") as fh:
            doc = json.load(fh)
        if not isinstance(doc, dict):
            raise ValueError(f"{self.path}: database document must be a JSON object")
        return doc

    def _write(self, state: dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp = tempfile.mkstemp(prefix=".db-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(state, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_state(self) -> dict[str, Any]:
        """Deep copy of the current document."""
        with self._lock:
            return copy.deepcopy(self._state)

    def set_state(self, document: dict[str, Any]) -> None:
        """Replace the entire document (no merge) and persist it."""
        if not isinstance(document, dict):
            raise ValueError("database document must be a JSON object")
        new_state = copy.deepcopy(document)
        with self._lock:
            self._write(new_state)
            self._state = new_state

    def read(self, fn: Callable[[dict[str, Any]], T]) -> T:
        with self._lock:
            return copy.deepcopy(fn(self._state))

    def mutate(self, fn: Callable[[dict[str, Any]], T]) -> T:
        # fn edits a working copy; it replaces the live document once it is on disk
        with self._lock:
            draft = copy.deepcopy(self._state)
            result = fn(draft)
            self._write(draft)
            self._state = draft
            return copy.deepcopy(result)


def next_id(records: list[Any]) -> int | str:
    """Next id for a collection: max+1 for integer ids, otherwise random hex."""
    ids = [r.get("id") for r in records if isinstance(r, dict) and "id" in r]
    if all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
        return max(ids, default=0) + 1
    taken = {str(i) for i in ids}
    while True:
        candidate = uuid.uuid4().hex[:4]
        if candidate not in taken:
            return candidate


def find_index(records: list[Any], record_id: str) -> int | None:
    for idx, rec in enumerate(records):
        if isinstance(rec, dict) and rec.get("id") is not None and str(rec["id"]) == record_id:
            return idx
    return None


__all__ = ["JsonDatabase", "find_index", "next_id"]
