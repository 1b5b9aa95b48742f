import json
import threading
import time

import pytest

from crudops.errors import BadRequestError
from crudops.utility_api import (
    INVALID_DELAY_MESSAGE,
    INVALID_STATUS_MESSAGE,
    MAX_DELAY_MS,
    parse_delay,
    parse_status_code,
)


# ---- reset ----

def test_reset_discards_mutations(client, auth_headers, template_doc, cfg):
    client.post("/api/posts", json={"title": "temp"}, headers=auth_headers)
    client.delete("/api/posts/1", headers=auth_headers)
    client.patch("/api/profile", json={"name": "changed"}, headers=auth_headers)

    r = client.post("/api/reset", headers=auth_headers)
    assert r.status_code == 200
    assert r.data == b""
    for key, value in template_doc.items():
        assert client.get(f"/api/{key}").get_json() == value
    with open(cfg.database_path, encoding="utf-8") as fh:
        assert json.load(fh) == template_doc


def test_reset_uses_current_template_contents(client, auth_headers, workspace):
    (workspace / "templates" / "testdata.json").write_text('{"widgets": [{"id": "w1"}]}', encoding="utf-8")
    assert client.post("/api/reset", headers=auth_headers).status_code == 200
    assert client.get("/api/widgets").get_json() == [{"id": "w1"}]
    # full overwrite, not a merge
    assert client.get("/api/posts").status_code == 404


def test_reset_requires_token(client):
    assert client.post("/api/reset").status_code == 401


def test_reset_with_missing_template_is_a_server_error(client, auth_headers, workspace):
    (workspace / "templates" / "testdata.json").unlink()
    r = client.post("/api/reset", headers=auth_headers)
    assert r.status_code == 500
    data = r.get_json()
    assert data["error"] == "internal_error"
    assert data["incident_id"]
    # state untouched
    assert len(client.get("/api/posts").get_json()) == 2


def test_reset_with_malformed_template_is_a_server_error(client, auth_headers, workspace):
    (workspace / "templates" / "testdata.json").write_text("{oops", encoding="utf-8")
    assert client.post("/api/reset", headers=auth_headers).status_code == 500


def test_get_reset_is_not_the_reset_endpoint(client):
    r = client.get("/api/reset")
    assert r.status_code == 404


# ---- status ----

@pytest.mark.parametrize("code", [200, 250, 404, 418, 500, 599])
def test_status_echoes_requested_code(client, code):
    r = client.get(f"/api/status/{code}", headers={"X-Custom": "yes"})
    assert r.status_code == code
    data = r.get_json()
    assert data["statusCode"] == code
    assert str(code) in data["message"]
    assert data["headers"]["x-custom"] == "yes"
    assert data["body"] == {}


@pytest.mark.parametrize("raw", ["700", "199", "abc", "NaN", "Infinity", "250.5", "-404"])
def test_status_rejects_invalid_codes(client, raw):
    r = client.get(f"/api/status/{raw}")
    assert r.status_code == 400
    assert r.get_json()["message"] == INVALID_STATUS_MESSAGE


def test_status_accepts_any_method(client, auth_headers):
    for method in ("post", "put", "patch", "delete"):
        r = getattr(client, method)("/api/status/202", json={"x": 1}, headers=auth_headers)
        assert r.status_code == 202
        assert r.get_json()["body"]["x"] == 1


def test_status_echoes_form_bodies(client, auth_headers):
    r = client.put("/api/status/200", data={"name": "kari"}, headers=auth_headers)
    assert r.get_json()["body"]["name"] == "kari"


def test_parse_status_code():
    assert parse_status_code("250") == 250
    assert parse_status_code("3e2") == 300
    with pytest.raises(BadRequestError):
        parse_status_code("600")


# ---- delay ----

def test_delay_waits_before_answering(client):
    t0 = time.perf_counter()
    r = client.get("/api/delay/100")
    elapsed_ms = (time.perf_counter() - t0) * 1000
    assert r.status_code == 200
    assert elapsed_ms >= 100
    data = r.get_json()
    assert "100" in data["message"]
    assert data["body"] == {}
    assert "host" in data["headers"]


def test_delay_rounds_up(client, monkeypatch):
    slept = []
    monkeypatch.setattr("crudops.utility_api.time.sleep", slept.append)
    r = client.get("/api/delay/12.2")
    assert r.status_code == 200
    assert slept == [0.013]
    assert "13 milliseconds" in r.get_json()["message"]


@pytest.mark.parametrize("raw", ["-5", "0", "abc", "nan", "inf"])
def test_delay_rejects_invalid_values_immediately(client, raw):
    t0 = time.perf_counter()
    r = client.get(f"/api/delay/{raw}")
    assert (time.perf_counter() - t0) < 0.5
    assert r.status_code == 400
    assert r.get_json()["message"] == INVALID_DELAY_MESSAGE


def test_delay_does_not_stall_other_requests(app):
    done = {}

    def _slow():
        done["slow"] = app.test_client().get("/api/delay/400").status_code

    th = threading.Thread(target=_slow)
    th.start()
    time.sleep(0.05)
    t0 = time.perf_counter()
    fast = app.test_client().get("/api/posts")
    fast_ms = (time.perf_counter() - t0) * 1000
    assert fast.status_code == 200
    assert fast_ms < 300
    assert "slow" not in done
    th.join()
    assert done["slow"] == 200


def test_parse_delay():
    assert parse_delay("1") == 1
    assert parse_delay("0.1") == 1
    with pytest.raises(BadRequestError):
        parse_delay("0")
    assert parse_delay(str(MAX_DELAY_MS)) == MAX_DELAY_MS
    with pytest.raises(BadRequestError):
        parse_delay(str(MAX_DELAY_MS + 1))


@pytest.mark.parametrize("raw", ["1e300", "2147483648"])
def test_delay_rejects_values_beyond_the_maximum(client, monkeypatch, raw):
    slept = []
    monkeypatch.setattr("crudops.utility_api.time.sleep", slept.append)
    r = client.get(f"/api/delay/{raw}")
    assert r.status_code == 400
    assert str(MAX_DELAY_MS) in r.get_json()["message"]
    assert slept == []
