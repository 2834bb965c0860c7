"""Notion Sync Service 엔드포인트 테스트."""

import os
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from trade_mirror.domain.config import AppConfig, BinanceConfig, NotionConfig, get_config
from trade_mirror.domain.health import DependencyHealth
from trade_mirror.domain.sync import SyncReport
from trade_mirror.infra.binance import BinanceApiError
from trade_mirror.infra.redis import SyncInProgressError
from trade_mirror.services.deps import get_app_config, get_sync_runner
from trade_mirror.services.sync.app import _limiter, app

COMPLETE = AppConfig(
    binance=BinanceConfig(api_key="k", api_secret="s"),
    notion=NotionConfig(token="t", trades_db_id="trades", balance_db_id="balance"),
)


def _report(**kwargs) -> SyncReport:
    return SyncReport(started_at=datetime(2026, 1, 1, tzinfo=UTC), **kwargs)


@pytest.fixture(autouse=True)
def _reset_limiter():
    _limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def runner():
    mock = MagicMock()
    mock.run.return_value = _report(balance=1000.0, balance_written=True, fetched=2, created=1, updated=1)
    mock.run_balance.return_value = _report(balance=1000.0, balance_written=True)
    mock.run_trades.return_value = _report(fetched=1, created=1)
    return mock


@pytest.fixture
def client(runner):
    app.dependency_overrides[get_app_config] = lambda: COMPLETE
    app.dependency_overrides[get_sync_runner] = lambda: runner
    return TestClient(app)


@pytest.fixture
def incomplete_client(runner):
    config = AppConfig(binance=BinanceConfig(api_key="k"), notion=NotionConfig())
    app.dependency_overrides[get_app_config] = lambda: config
    app.dependency_overrides[get_sync_runner] = lambda: runner
    return TestClient(app)


class TestSyncEndpoint:
    def test_success(self, client, runner):
        resp = client.post("/api/sync")

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "sync completed"
        assert data["report"]["created"] == 1
        assert data["report"]["updated"] == 1
        assert data["report"]["balance"] == 1000.0
        runner.run.assert_called_once()

    def test_get_also_triggers(self, client, runner):
        assert client.get("/api/sync").status_code == 200
        runner.run.assert_called_once()

    def test_missing_config(self, incomplete_client, runner):
        resp = incomplete_client.post("/api/sync")

        assert resp.status_code == 400
        data = resp.json()
        assert data["success"] is False
        assert data["missing"] == {
            "binance_api_key": False,
            "binance_api_secret": True,
            "notion_token": True,
            "notion_trades_db_id": True,
            "notion_balance_db_id": True,
        }
        runner.run.assert_not_called()

    def test_lock_held_returns_409(self, client, runner):
        runner.run.side_effect = SyncInProgressError("Another sync run holds lock")

        resp = client.post("/api/sync")

        assert resp.status_code == 409
        assert resp.json()["success"] is False

    def test_binance_failure_returns_500(self, client, runner):
        runner.run.side_effect = BinanceApiError("Invalid API-key", status_code=401, code=-2015)

        resp = client.post("/api/sync")

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Invalid API-key"}


class TestPartialEndpoints:
    def test_balance_sync(self, client, runner):
        resp = client.post("/api/balance-sync")

        assert resp.status_code == 200
        assert resp.json()["report"]["balance_written"] is True
        runner.run_balance.assert_called_once()
        runner.run.assert_not_called()

    def test_trade_log(self, client, runner):
        resp = client.get("/api/trade-log")

        assert resp.status_code == 200
        assert resp.json()["report"]["created"] == 1
        runner.run_trades.assert_called_once()
        runner.run_balance.assert_not_called()

    def test_partial_missing_config(self, incomplete_client, runner):
        assert incomplete_client.post("/api/balance-sync").status_code == 400
        assert incomplete_client.post("/api/trade-log").status_code == 400
        runner.run_balance.assert_not_called()
        runner.run_trades.assert_not_called()


class TestConfigCheck:
    def test_configured(self, client, runner):
        resp = client.get("/api/binance-sync")

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["config"]["binance_api_configured"] is True
        assert data["config"]["trades_db_configured"] is True
        assert "timestamp" in data
        runner.run.assert_not_called()

    def test_missing(self, incomplete_client):
        resp = incomplete_client.get("/api/binance-sync")

        assert resp.status_code == 400
        assert resp.json()["missing"]["notion_token"] is True


class TestRateLimit:
    def test_trigger_limited(self, client):
        get_config.cache_clear()
        with patch.dict(os.environ, {"SYNC_TRIGGER_RATE_LIMIT": "1/minute"}):
            first = client.post("/api/sync")
            second = client.post("/api/sync")
        get_config.cache_clear()

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.json()["success"] is False


class TestHealth:
    def test_healthy(self, client):
        with patch(
            "trade_mirror.services.base._check_dependency",
            return_value=DependencyHealth(status="healthy", latency_ms=1.0),
        ):
            resp = client.get("/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["service"] == "notion-sync"
        assert data["status"] == "healthy"
        assert set(data["dependencies"]) == {"redis", "binance", "notion"}

    def test_dependency_down(self, client):
        with patch(
            "trade_mirror.services.base._check_dependency",
            return_value=DependencyHealth(status="down", message="unreachable"),
        ):
            resp = client.get("/health")

        assert resp.json()["status"] == "unhealthy"


class TestOptions:
    def test_bare_options(self, client, runner):
        resp = client.options("/api/sync")

        assert resp.status_code == 200
        runner.run.assert_not_called()

    def test_preflight_handled_by_cors(self, client):
        resp = client.options(
            "/api/sync",
            headers={"Origin": "https://dashboard.example", "Access-Control-Request-Method": "POST"},
        )

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"


class TestConfigValidationError:
    def test_invalid_env_value_returns_400(self, runner):
        def broken_config() -> AppConfig:
            return AppConfig(binance=BinanceConfig(income_limit=0))

        app.dependency_overrides[get_app_config] = broken_config
        app.dependency_overrides[get_sync_runner] = lambda: runner

        resp = TestClient(app).post("/api/sync")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation error"
        runner.run.assert_not_called()
