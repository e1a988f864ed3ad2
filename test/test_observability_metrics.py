from fastapi.testclient import TestClient

from api.main import create_app
from api.state import AppState
from wizard.session import WizardSession


def _client() -> TestClient:
    return TestClient(create_app(AppState(session=WizardSession())))


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    client = _client()

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    body = r.text
    assert "shift_sync_requests_total" in body
    assert "shift_sync_request_latency_seconds" in body
    assert "shift_sync_shifts_extracted_total" in body


def test_requests_are_counted_by_route() -> None:
    client = _client()
    assert client.get("/health").status_code == 200

    lines = client.get("/metrics").text.splitlines()
    found = any(
        line.startswith('shift_sync_requests_total{endpoint="/health",status="200"}')
        for line in lines
    )
    assert found, "Expected shift_sync_requests_total sample line for /health"


def test_route_template_used_as_label() -> None:
    client = _client()
    # toggling at CONFIG is rejected, still counted under the templated path
    assert client.post("/wizard/shifts/3/toggle").status_code == 409

    body = client.get("/metrics").text
    assert 'endpoint="/wizard/shifts/{index}/toggle",status="409"' in body
