"""Integration tests for the HTTP API over an in-memory store."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from kvscope.api.dependencies import get_inspector
from kvscope.api.main import app, status_for
from kvscope.errors import DecodeError, InvalidKeyError, KeyNotFoundError, StoreError, UnknownTableError
from kvscope.tables.keys import WatchTableKey, partition_id_for
from tests.helpers import HOUR, watch_key


@pytest.fixture
def client(inspector):
    app.dependency_overrides[get_inspector] = lambda: inspector
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "kvscope API"
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_status_reports_store_layout(client):
    response = client.get("/status")
    assert response.status_code == 200
    body = response.json()
    assert body["backend"] == "memory"
    assert body["tables"] == ["watch", "eventcount", "ressum", "watchactivity"]
    assert body["internal_prefix"] == "!kv"
    assert body["partition_duration_hours"] == 1


class TestListKeys:
    def test_regex_search(self, client):
        response = client.get(
            "/debug/listkeys", params={"table": "watch", "searchOption": "regex", "keymatch": "web-1"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "regex"
        assert body["keys"] == [watch_key(0, "web-1")]
        assert body["matched_count"] == 1
        assert body["total_scanned"] == 5
        assert body["sizes_known"] is True
        assert body["capped"] is False

    def test_regex_cap(self, client):
        response = client.get(
            "/debug/listkeys", params={"table": "all", "searchOption": "regex", "maxrows": 2}
        )
        body = response.json()
        assert len(body["keys"]) == 2
        assert body["capped"] is True

    def test_partition_search_is_default(self, client, populated_store):
        now = datetime.now(timezone.utc)
        key = WatchTableKey(
            partition_id=partition_id_for(now, HOUR),
            kind="Pod",
            namespace="default",
            name="fresh",
            timestamp=int(now.timestamp()) * 1_000_000_000,
        )
        populated_store.put(str(key).encode(), b"{}")

        response = client.get("/debug/listkeys", params={"table": "watch", "lookback": 2, "urlmatch": "fresh"})
        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "partition"
        assert body["keys"] == [str(key)]
        assert body["total_scanned"] == body["matched_count"] == 1
        assert body["sizes_known"] is False

    def test_no_table_selected(self, client):
        body = client.get("/debug/listkeys").json()
        assert body["keys"] == []

    def test_bad_regex(self, client):
        response = client.get(
            "/debug/listkeys", params={"table": "watch", "searchOption": "regex", "keymatch": "web-("}
        )
        assert response.status_code == 400
        assert "Invalid regex" in response.json()["detail"]

    def test_unknown_table(self, client):
        response = client.get("/debug/listkeys", params={"table": "nodes"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown table: nodes"


class TestHistogram:
    def test_whole_key_space(self, client):
        body = client.get("/debug/histogram", params={"prefix": "*"}).json()
        assert body["computed"] is True
        assert body["total_keys"] == 13
        assert body["head_keys"] == 2
        assert len(body["categories"]) == 6

    def test_no_prefix(self, client):
        body = client.get("/debug/histogram").json()
        assert body["computed"] is False

    def test_malformed_key_is_server_error(self, client, populated_store):
        populated_store.put(b"/watch/broken", b"{}")
        response = client.get("/debug/histogram", params={"prefix": "*"})
        assert response.status_code == 500
        assert "failed to parse information about key" in response.json()["detail"]


class TestViewKey:
    def test_watch_key(self, client):
        response = client.get("/debug/viewkey", params={"k": watch_key(0, "web-0")})
        assert response.status_code == 200
        body = response.json()
        assert body["table"] == "watch"
        assert body["extra_name"] == "$.Payload"

    def test_invalid_key(self, client):
        response = client.get("/debug/viewkey", params={"k": "/nope"})
        assert response.status_code == 400

    def test_missing_key(self, client):
        response = client.get("/debug/viewkey", params={"k": watch_key(0, "gone")})
        assert response.status_code == 404

    def test_key_is_required(self, client):
        assert client.get("/debug/viewkey").status_code == 422


def test_storage_tables(client):
    body = client.get("/debug/tables").json()
    assert body[0]["id"] == "memtable"
    assert body[0]["key_count"] == 13


def test_config(client):
    body = client.get("/debug/config").json()
    assert body["internal_prefix"] == "!kv"
    assert body["partition_duration_hours"] == 1


@pytest.mark.parametrize(
    "error,expected",
    [
        (KeyNotFoundError("gone"), 404),
        (InvalidKeyError("bad"), 400),
        (UnknownTableError("nope"), 400),
        (DecodeError("garbled"), 500),
        (StoreError("disk"), 500),
    ],
)
def test_status_mapping(error, expected):
    assert status_for(error) == expected
