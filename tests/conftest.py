import json
import os
import sys

import pytest

# Path setup before any project imports
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

from crudops.app_factory import create_app  # noqa: E402
from crudops.bootstrap import prepare  # noqa: E402
from crudops.config import Config  # noqa: E402

API_KEY = "test-key"

TEMPLATE_DOC = {
    "posts": [
        {"id": 1, "title": "first", "author": "kari", "created": "2025-01-01T00:00:00.000Z", "updated": "2025-01-01T00:00:00.000Z"},
        {"id": 2, "title": "second", "author": "ola", "published": True},
    ],
    "comments": [],
    "profile": {"name": "crudops", "created": "2025-01-01T00:00:00.000Z"},
    "motd": "hello",
}


@pytest.fixture()
def workspace(tmp_path):
    """Template store with one template and a not-yet-created database path."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "testdata.json").write_text(json.dumps(TEMPLATE_DOC, indent=2), encoding="utf-8")
    return tmp_path


@pytest.fixture()
def cfg(workspace):
    return Config(
        template_name="testdata.json",
        api_key=API_KEY,
        templates_dir=str(workspace / "templates"),
        database_path=str(workspace / "db.json"),
    )


@pytest.fixture()
def app(cfg):
    prepare(cfg)
    app = create_app(cfg, {"TESTING": True})
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {API_KEY}"}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("TEMPLATE", "API_KEY", "TEMPLATES_DIR", "DATABASE_FILE", "MOUNT_PATH", "PORT", "HOST", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def template_doc():
    return json.loads(json.dumps(TEMPLATE_DOC))
