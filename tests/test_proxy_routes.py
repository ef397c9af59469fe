"""Tests for the pass-through report, tracking, form config and health routes."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.adapters.dashboard.base import AbstractDashboardClient, UpstreamResponse
from app.adapters.dashboard.factory import create_dashboard_client
from app.api.routes import forms as forms_module
from app.api.routes import health as health_module
from app.core.config import settings
from app.core.errors import UpstreamAppError
from app.main import app


@pytest.fixture
def dashboard() -> AsyncMock:
    return AsyncMock(spec=AbstractDashboardClient)


@pytest.fixture
def client(dashboard: AsyncMock):
    forms_module.get_config_cache().clear()
    app.dependency_overrides[create_dashboard_client] = lambda: dashboard
    yield TestClient(app)
    app.dependency_overrides.clear()
    forms_module.get_config_cache().clear()


class TestReportSubmission:
    def test_relays_json_body_and_status(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.submit_report.return_value = UpstreamResponse(
            201, {"success": True, "trackingId": "WB-7K2M9Q"}
        )

        response = client.post("/api/submit", json={"subdomain": "acme-corp", "subject": "Harassment"})

        assert response.status_code == 201
        assert response.json() == {"success": True, "trackingId": "WB-7K2M9Q"}
        body, content_type = dashboard.submit_report.await_args.args
        assert b'"subject":"Harassment"' in body.replace(b" ", b"")
        assert content_type.startswith("application/json")

    def test_relays_multipart_with_boundary(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.submit_report.return_value = UpstreamResponse(201, {"success": True, "trackingId": "WB-1"})

        response = client.post(
            "/api/submit",
            data={"data": '{"subdomain": "acme-corp"}'},
            files={"files": ("evidence.txt", b"ledger excerpt", "text/plain")},
        )

        assert response.status_code == 201
        body, content_type = dashboard.submit_report.await_args.args
        assert content_type.startswith("multipart/form-data; boundary=")
        assert b"ledger excerpt" in body

    def test_upstream_error_status_is_relayed(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.submit_report.return_value = UpstreamResponse(422, {"error": "Missing category"})

        response = client.post("/api/submit", json={})

        assert response.status_code == 422
        assert response.json() == {"error": "Missing category"}

    def test_unreachable_dashboard_returns_502(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.submit_report.side_effect = UpstreamAppError(
            code="upstream_unreachable", message="Failed to connect to dashboard API"
        )

        response = client.post("/api/submit", json={})

        assert response.status_code == 502
        assert response.json()["error"]["message"] == "Failed to connect to dashboard API"

    def test_report_submission_is_not_rate_limited(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.submit_report.return_value = UpstreamResponse(201, {"success": True})

        statuses = {client.post("/api/submit", json={}).status_code for _ in range(8)}

        assert statuses == {201}


class TestTracking:
    def test_passes_tracking_id_and_password(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.track_report.return_value = UpstreamResponse(
            200, {"success": True, "report": {"trackingId": "WB-7K2M9Q", "status": "in_review"}}
        )

        response = client.get("/api/track/WB-7K2M9Q", params={"password": "s3cret!"})

        assert response.status_code == 200
        assert response.json()["report"]["status"] == "in_review"
        dashboard.track_report.assert_awaited_once_with("WB-7K2M9Q", "s3cret!")

    def test_empty_password_is_dropped(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.track_report.return_value = UpstreamResponse(200, {"success": True})

        client.get("/api/track/WB-1", params={"password": ""})

        dashboard.track_report.assert_awaited_once_with("WB-1", None)

    def test_not_found_is_relayed(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.track_report.return_value = UpstreamResponse(404, {"success": False, "error": "Report not found"})

        response = client.get("/api/track/WB-404")

        assert response.status_code == 404
        assert response.json()["error"] == "Report not found"


class TestFormConfig:
    CONFIG = {
        "company": {"id": "co-1", "name": "Acme Corp", "subdomain": "acme-corp"},
        "branding": {"name": "Acme", "logo": "/logo.svg", "subdomain": "acme-corp"},
        "categories": [{"id": "fraud", "name": "Fraud", "isActive": True}],
    }

    def test_returns_config_with_cache_control(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.get_form_config.return_value = UpstreamResponse(200, self.CONFIG)

        response = client.get("/api/config/acme-corp")

        assert response.status_code == 200
        assert response.json() == self.CONFIG
        assert response.headers["Cache-Control"] == "public, max-age=300, s-maxage=300"

    def test_successful_config_is_cached(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.get_form_config.return_value = UpstreamResponse(200, self.CONFIG)

        first = client.get("/api/config/acme-corp")
        second = client.get("/api/config/acme-corp")

        assert first.json() == second.json()
        assert dashboard.get_form_config.await_count == 1

    def test_errors_are_relayed_and_not_cached(self, client: TestClient, dashboard: AsyncMock) -> None:
        dashboard.get_form_config.return_value = UpstreamResponse(404, {"error": "Company not found"})

        assert client.get("/api/config/ghost").status_code == 404
        assert client.get("/api/config/ghost").status_code == 404
        assert dashboard.get_form_config.await_count == 2

    def test_missing_dashboard_url_returns_503(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.app, "dashboard_api_url", None)

        response = TestClient(app).get("/api/config/acme-corp")

        assert response.status_code == 503
        assert response.json()["error"]["message"] == "Dashboard API URL not configured"


class TestHealth:
    def test_liveness(self) -> None:
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_readiness_healthy(self, dashboard: AsyncMock, monkeypatch: pytest.MonkeyPatch) -> None:
        dashboard.health_check.return_value = True
        monkeypatch.setattr(health_module, "create_dashboard_client", lambda: dashboard)

        response = TestClient(app).get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services"] == {"dashboard_api": True, "self": True}
        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"

    def test_readiness_degraded_when_dashboard_down(
        self, dashboard: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        dashboard.health_check.return_value = False
        monkeypatch.setattr(health_module, "create_dashboard_client", lambda: dashboard)

        response = TestClient(app).get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    def test_readiness_degraded_when_not_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.app, "dashboard_api_url", None)

        response = TestClient(app).get("/api/health")

        assert response.status_code == 503
        body = response.json()
        assert body["services"]["dashboard_api"] is False
        assert body["environment"]["dashboard_url"] == "not-configured"
