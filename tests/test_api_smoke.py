from __future__ import annotations

from fastapi.testclient import TestClient

from dnsids.data.store import InMemoryRecordStore


def test_health_generate_analyze_export(monkeypatch) -> None:
    from dnsids.service import api

    monkeypatch.setattr(api, "STORE", InMemoryRecordStore())
    client = TestClient(api.app)

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"

    empty = client.post("/api/detection/analysis")
    assert empty.status_code == 200
    empty_payload = empty.json()
    assert empty_payload["attack_type"] == "NONE"
    assert empty_payload["threats_detected"] == 0

    generated = client.post("/api/dataset/generate", params={"queryCount": 1000})
    assert generated.status_code == 200
    assert generated.json()["query_count"] == 1000

    analysis = client.post("/api/detection/analysis")
    assert analysis.status_code == 200
    payload = analysis.json()
    assert payload["queries_analyzed"] == 1000
    assert payload["attack_type"] == "MULTIPLE_ATTACKS_DETECTED"
    assert payload["threats_detected"] == len(payload["threats"])
    assert 0 <= payload["risk_score"] <= 100
    assert payload["severity"] in {"CRITICAL", "HIGH", "MEDIUM", "LOW"}
    scores = [t["risk_score"] for t in payload["threats"]]
    assert scores == sorted(scores, reverse=True)

    exported = client.get("/api/dataset/export")
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("text/csv")
    lines = exported.text.strip().splitlines()
    assert lines[0].startswith("timestamp,client_ip")
    assert len(lines) == 1001


def test_generate_replaces_previous_dataset(monkeypatch) -> None:
    from dnsids.service import api

    monkeypatch.setattr(api, "STORE", InMemoryRecordStore())
    client = TestClient(api.app)
    client.post("/api/dataset/generate", params={"queryCount": 300})
    client.post("/api/dataset/generate", params={"queryCount": 200})
    payload = client.post("/api/detection/analysis").json()
    assert payload["queries_analyzed"] == 200


def test_generate_rejects_invalid_count(monkeypatch) -> None:
    from dnsids.service import api

    monkeypatch.setattr(api, "STORE", InMemoryRecordStore())
    client = TestClient(api.app)
    assert client.post("/api/dataset/generate", params={"queryCount": 0}).status_code == 422


def test_cors_preflight_allows_local_dev_origins() -> None:
    from dnsids.service import api

    client = TestClient(api.app)
    headers = {"Access-Control-Request-Method": "POST"}
    allowed = client.options(
        "/api/detection/analysis", headers={**headers, "Origin": "http://localhost:3000"}
    )
    assert allowed.status_code == 200
    assert allowed.headers["access-control-allow-origin"] == "http://localhost:3000"

    loopback = client.options("/api/detection/analysis", headers={**headers, "Origin": "http://127.0.0.1"})
    assert loopback.status_code == 200

    foreign = client.options("/api/detection/analysis", headers={**headers, "Origin": "http://evil.example"})
    assert foreign.status_code == 400
    assert "access-control-allow-origin" not in foreign.headers
