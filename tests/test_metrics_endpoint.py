from fastapi.testclient import TestClient
import pytest
from prometheus_client import REGISTRY

from dbexplorer.app import app
from dbexplorer import monitoring


@pytest.fixture
def client(explorer_db):
    return TestClient(app)


def test_metrics_endpoint_returns_prometheus_format(client, monkeypatch):
    monkeypatch.setattr(monitoring, "PROMETHEUS_ENABLED", True)
    client.get("/items")
    r = client.get("/-/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    assert "dbexplorer_requests_total" in r.text
    assert 'operation="list_records"' in r.text


def test_metrics_disabled(client, monkeypatch):
    monkeypatch.setattr(monitoring, "PROMETHEUS_ENABLED", False)
    r = client.get("/-/metrics")
    assert r.status_code == 404


def test_health_still_works(client):
    r = client.get("/-/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_health_does_not_shadow_tables(client):
    r = client.get("/health")
    assert r.status_code == 404
    assert r.json() == {"error": "unknown table"}


def _error_count():
    labels = {"operation": "get_record", "outcome": "error"}
    return REGISTRY.get_sample_value("dbexplorer_operations_total", labels) or 0


def test_operation_outcomes_counted(client):
    before = _error_count()
    client.get("/items/12345")
    assert _error_count() == before + 1


def test_helpers_never_raise():
    monitoring.observe_request(0.0, "list_tables", "GET", "200")
    monitoring.inc_operation("list_tables", "success")
    monitoring.set_rows_returned(3)
    body, content_type = monitoring.prometheus_metrics_response()
    assert isinstance(body, bytes)
    assert content_type
