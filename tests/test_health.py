import pytest
from fastapi.testclient import TestClient

from lending_admin.core import health as health_module
from lending_admin.main import app

client = TestClient(app)


async def _ok():
    return {"status": "ok"}


async def _unreachable():
    return {"status": "error", "error": "ConnectionRefusedError"}


@pytest.fixture(autouse=True)
def _mock_env(monkeypatch):
    monkeypatch.setattr(health_module.settings, "environment", "test")
    monkeypatch.setattr(health_module, "_check_db", _ok)
    monkeypatch.setattr(health_module, "_check_redis", _ok)
    yield


def test_health_live_returns_ok() -> None:
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload.get("status") == "ok"
    assert "timestamp" in payload


def test_health_live_echoes_request_id() -> None:
    response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


def test_health_live_replaces_unsafe_request_id() -> None:
    response = client.get("/api/v1/health/live", headers={"X-Request-ID": "not a safe id"})
    assert response.headers["x-request-id"] != "not a safe id"


def test_health_ready_reports_pipeline_configuration() -> None:
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["status"] == "ok"
    assert payload["ready"] is True
    assert payload["environment"] == "test"
    assert payload["checks"]["api"]["version"] == health_module.APP_VERSION
    assert payload["checks"]["mutations"]["transitionMode"] == app.state.pipeline.policy.mode
    assert payload["checks"]["mutations"]["deliverer"] == type(app.state.pipeline.deliverer).__name__


@pytest.mark.parametrize("failing_check", ["_check_db", "_check_redis"])
def test_health_ready_degraded_when_a_dependency_is_down(monkeypatch, failing_check) -> None:
    monkeypatch.setattr(health_module, failing_check, _unreachable)

    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["status"] == "degraded"
    assert payload["ready"] is False


@pytest.mark.asyncio
async def test_ready_payload_without_pipeline_is_degraded() -> None:
    payload = await health_module.ready_payload(None)
    assert payload["checks"]["mutations"]["status"] == "error"
    assert payload["ready"] is False
