"""SyncRunner — 동기화 1회 실행 오케스트레이션.

전체 실행 순서:
    (락) → 잔고 조회 → 잔고 스냅샷 → income 조회 → 건별 업서트 → (락 해제)

Binance 오류는 치명적 — 실행 전체 중단 후 호출자에게 전파.
Notion 오류는 SyncEngine에서 레코드 단위로 흡수.
"""

import contextlib
import logging
from collections.abc import Iterator
from datetime import UTC, datetime

import redis

from trade_mirror.domain.config import AppConfig
from trade_mirror.domain.sync import SyncReport
from trade_mirror.infra.binance import BinanceApiError, BinanceClient
from trade_mirror.infra.notion import NotionClient
from trade_mirror.infra.redis import RunLock

from .engine import SyncEngine

logger = logging.getLogger(__name__)

# /fapi/v1/income limit 상한
MAX_INCOME_LIMIT = 1000


class SyncRunner:
    """잔고/거래 동기화 실행기.

    Usage:
        runner = build_runner(get_config(), get_redis())
        report = runner.run()
    """

    def __init__(
        self,
        binance: BinanceClient,
        engine: SyncEngine,
        config: AppConfig,
        lock: RunLock | None = None,
    ):
        self._binance = binance
        self._engine = engine
        self._config = config
        self._lock = lock

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    def run(self, *, limit: int | None = None) -> SyncReport:
        """잔고 스냅샷 + 거래 업서트 전체 실행."""
        limit = self._income_limit(limit)
        report = SyncReport(started_at=datetime.now(UTC))
        logger.info("Binance → Notion sync started")
        with self._locked():
            try:
                self._sync_balance(report)
                self._sync_trades(report, limit)
            except BinanceApiError:
                logger.exception("Sync aborted: Binance API failure")
                raise
        return self._finish(report)

    def run_balance(self) -> SyncReport:
        """잔고 스냅샷만 실행."""
        report = SyncReport(started_at=datetime.now(UTC))
        with self._locked():
            try:
                self._sync_balance(report)
            except BinanceApiError:
                logger.exception("Balance sync aborted: Binance API failure")
                raise
        return self._finish(report)

    def run_trades(self, *, limit: int | None = None) -> SyncReport:
        """거래 업서트만 실행."""
        limit = self._income_limit(limit)
        report = SyncReport(started_at=datetime.now(UTC))
        with self._locked():
            try:
                self._sync_trades(report, limit)
            except BinanceApiError:
                logger.exception("Trade sync aborted: Binance API failure")
                raise
        return self._finish(report)

    def _sync_balance(self, report: SyncReport) -> None:
        amount = self._binance.fetch_balance()
        report.balance = amount
        report.balance_written = self._engine.update_balance(amount) is not None

    def _sync_trades(self, report: SyncReport, limit: int) -> None:
        events = self._binance.fetch_income(limit)
        self._engine.sync_income(events, report)

    def _income_limit(self, limit: int | None) -> int:
        """명시 limit 검증. None이면 BINANCE_INCOME_LIMIT."""
        if limit is None:
            return self._config.binance.income_limit
        if not 1 <= limit <= MAX_INCOME_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_INCOME_LIMIT}, got {limit}")
        return limit

    def close(self) -> None:
        self._binance.close()
        self._engine.close()

    @staticmethod
    def _finish(report: SyncReport) -> SyncReport:
        report.finished_at = datetime.now(UTC)
        logger.info(
            "Sync finished: fetched=%d created=%d updated=%d failed=%d balance_written=%s",
            report.fetched,
            report.created,
            report.updated,
            report.failed,
            report.balance_written,
        )
        return report


def build_runner(config: AppConfig, redis_client: redis.Redis | None = None) -> SyncRunner:
    """설정 객체로 클라이언트/엔진/락 조립.

    SYNC_LOCK_ENABLED=true면 redis_client가 필요.
    """
    lock = None
    if config.sync.lock_enabled:
        if redis_client is None:
            raise ValueError("redis_client is required when sync lock is enabled")
        lock = RunLock(redis_client, config.sync.lock_key, config.sync.lock_ttl_seconds)

    binance = BinanceClient(config.binance)
    notion = NotionClient(config.notion)
    return SyncRunner(binance, SyncEngine(notion, config), config, lock=lock)
