from __future__ import annotations

from fastapi.testclient import TestClient

from course_wizard.main import app


def test_health_endpoint_reports_model() -> None:
    client = TestClient(app)
    response = client.get("/healthz")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["model"] == "gpt-4o-mini"
