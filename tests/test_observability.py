from __future__ import annotations

import pytest

from apps.core.observability import MetricsRegistry

pytestmark = pytest.mark.django_db

ADMIN_HEADERS = {"HTTP_X_FORWARDED_USER": "ops@example.com", "HTTP_X_FORWARDED_GROUPS": "admin"}


def test_metrics_require_global_admin(client) -> None:
    anonymous = client.get("/api/v1/metrics")
    assert anonymous.status_code == 403
    member = client.get("/api/v1/metrics", HTTP_X_FORWARDED_USER="crew@example.com")
    assert member.status_code == 403
    assert member.json()["code"] == "forbidden"


def test_metrics_render_request_and_decision_counters(client) -> None:
    client.post(
        "/api/v1/tours",
        data={"tour_id": "metrics-tour", "name": "Metrics"},
        content_type="application/json",
        HTTP_X_FORWARDED_USER="tm@example.com",
    )
    client.get("/api/v1/tours/metrics-tour", HTTP_X_FORWARDED_USER="stranger@example.com")

    response = client.get("/api/v1/metrics", **ADMIN_HEADERS)
    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/plain")
    text = response.content.decode("utf-8")
    assert 'td_http_request_total{path="api/v1/tours",method="POST",status="201"} 1' in text
    assert 'td_decision_total{kind="authorize",outcome="deny"} 1' in text
    assert "td_http_request_duration_ms_bucket" in text


def test_empty_registry_renders_placeholder_decision() -> None:
    registry = MetricsRegistry()
    text = registry.render_prometheus()
    assert 'td_decision_total{kind="none",outcome="none"} 0' in text

    registry.observe_decision("conflict_check", "clear")
    registry.observe_decision("conflict_check", "clear")
    assert registry.decision_count("conflict_check", "clear") == 2
    assert 'kind="none"' not in registry.render_prometheus()


def test_health_endpoints(client) -> None:
    live = client.get("/api/v1/health/live")
    assert live.status_code == 200
    assert live.json() == {"ok": True, "service": "tourdesk", "status": "live"}

    ready = client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"
    assert ready.json()["config_issues"] == []

    health = client.get("/api/v1/health")
    assert health.json()["status"] == "healthy"


def test_readiness_reports_config_issues(client, monkeypatch) -> None:
    monkeypatch.setenv("TD_ENV", "prod")
    monkeypatch.delenv("TD_SECRET_KEY", raising=False)
    monkeypatch.delenv("TD_DEV_IDENTITY_ENABLED", raising=False)

    response = client.get("/api/v1/health/ready")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "not_ready"
    assert "TD_SECRET_KEY must be set to a non-default value in prod" in body["config_issues"]
