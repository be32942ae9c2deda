from fastapi.testclient import TestClient

import api.main as api_main
from api.main import app, get_sink
from storage.sqlite_backend import SQLiteSink


def make_client(tmp_path):
    sink = SQLiteSink(db_path=str(tmp_path / "api.db")).connect()
    app.dependency_overrides[get_sink] = lambda: sink
    return TestClient(app), sink


def test_health(tmp_path):
    client, _ = make_client(tmp_path)
    try:
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}
    finally:
        app.dependency_overrides.clear()


def test_ingest_and_query(tmp_path):
    client, _ = make_client(tmp_path)
    try:
        payload = {
            "source": "openvpn",
            "samples": [
                {
                    "category": "traffic",
                    "scope": "server.status",
                    "subscope": "alice",
                    "values": [100, 200],
                    "time": "2026-01-01T12:00:00+00:00",
                },
                {"category": "users", "scope": "server.status", "values": [1]},
            ],
        }
        r = client.post("/ingest/batch", json=payload)
        assert r.status_code == 200
        assert r.json() == {"ok": True, "received": 2}

        r = client.get("/samples", params={"category": "traffic"})
        samples = r.json()["samples"]
        assert len(samples) == 1
        assert samples[0]["subscope"] == "alice"
        assert samples[0]["values"] == [100, 200]
    finally:
        app.dependency_overrides.clear()


def test_ingest_rejects_unknown_category(tmp_path):
    client, _ = make_client(tmp_path)
    try:
        payload = {"samples": [{"category": "latency", "scope": "x", "values": [1]}]}
        r = client.post("/ingest/batch", json=payload)
        assert r.status_code == 422
    finally:
        app.dependency_overrides.clear()


def test_restart_reopens_sample_store(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENVPN_STATUS_FILES", raising=False)
    monkeypatch.setattr(api_main, "DB_PATH", str(tmp_path / "api.db"))
    monkeypatch.setattr(api_main, "_sink", None)

    payload = {"samples": [{"category": "users", "scope": "server.status", "values": [3]}]}
    for run in range(2):
        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "ok"}
            r = client.post("/ingest/batch", json=payload)
            assert r.status_code == 200
            r = client.get("/samples", params={"category": "users"})
            assert len(r.json()["samples"]) == run + 1
        assert api_main._sink is None
