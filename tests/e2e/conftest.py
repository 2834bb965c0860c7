"""E2E 테스트 공용 Fixtures.

Mock Binance + Mock Notion (httpx.MockTransport) + FakeRedis로
SyncRunner를 외부 의존 없이 구동.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import fakeredis
import pytest

from trade_mirror.domain.config import AppConfig, get_config
from trade_mirror.infra.binance import BinanceClient
from trade_mirror.infra.notion import NotionClient, TokenBucket
from trade_mirror.infra.redis import RunLock
from trade_mirror.services.sync import SyncEngine, SyncRunner

from .mock_upstreams import UpstreamState, create_binance_transport, create_notion_transport

TRADES_DB = "trades-db"
BALANCE_DB = "balance-db"

# ---------------------------------------------------------------------------
# Config patching
# ---------------------------------------------------------------------------

_TEST_ENV = {
    "APP_ENV": "test",
    "BINANCE_API_KEY": "test-key",
    "BINANCE_API_SECRET": "test-secret",
    "BINANCE_BASE_URL": "http://binance.mock",
    "NOTION_TOKEN": "secret_test",
    "NOTION_TRADES_DB_ID": TRADES_DB,
    "NOTION_BALANCE_DB_ID": BALANCE_DB,
    "NOTION_BASE_URL": "http://notion.mock/v1",
    "SYNC_LOCK_ENABLED": "true",
    "SYNC_TRIGGER_RATE_LIMIT": "100/minute",
}


@pytest.fixture(autouse=True)
def _patch_config():
    """모든 E2E 테스트에서 config 캐시를 클리어하고 테스트 환경 변수 주입."""
    get_config.cache_clear()
    with patch.dict(os.environ, _TEST_ENV, clear=False):
        yield
    get_config.cache_clear()


@pytest.fixture
def config() -> AppConfig:
    return get_config()


# ---------------------------------------------------------------------------
# Mock upstreams
# ---------------------------------------------------------------------------


@pytest.fixture
def upstream() -> UpstreamState:
    """Mutable 업스트림 상태 — 테스트에서 직접 변경."""
    return UpstreamState()


@pytest.fixture
def binance_client(config: AppConfig, upstream: UpstreamState) -> BinanceClient:
    client = BinanceClient(config.binance, transport=create_binance_transport(upstream))
    yield client
    client.close()


@pytest.fixture
def notion_client(config: AppConfig, upstream: UpstreamState) -> NotionClient:
    """대기 없는 TokenBucket을 쓰는 NotionClient."""
    client = NotionClient(
        config.notion,
        limiter=TokenBucket(rate=1000, capacity=1000),
        transport=create_notion_transport(upstream),
    )
    yield client
    client.close()


# ---------------------------------------------------------------------------
# FakeRedis
# ---------------------------------------------------------------------------


@pytest.fixture
def test_redis() -> fakeredis.FakeRedis:
    """격리된 FakeRedis 인스턴스."""
    r = fakeredis.FakeRedis(decode_responses=True)
    yield r
    r.flushall()
    r.close()


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


@pytest.fixture
def run_lock(config: AppConfig, test_redis: fakeredis.FakeRedis) -> RunLock:
    return RunLock(test_redis, config.sync.lock_key, config.sync.lock_ttl_seconds)


@pytest.fixture
def runner(
    config: AppConfig,
    binance_client: BinanceClient,
    notion_client: NotionClient,
    run_lock: RunLock,
) -> SyncRunner:
    return SyncRunner(binance_client, SyncEngine(notion_client, config), config, lock=run_lock)
