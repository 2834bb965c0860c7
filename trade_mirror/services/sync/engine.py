"""SyncEngine — income 이벤트 멱등 업서트 + 잔고 스냅샷.

업서트 흐름:
  1. unique_key = "{symbol}-{time}"
  2. income → Notion 속성 매핑
  3. 메모에 unique_key가 포함된 페이지 검색
  4. 있으면 첫 결과 페이지 속성 갱신, 없으면 생성
     (생성/갱신 모두 메모 끝에 " [key]" 유지)

Notion 오류는 레코드 단위로 잡아 로그 후 다음 레코드로 진행.
"""

import logging
from datetime import UTC, datetime

from trade_mirror.domain.config import AppConfig
from trade_mirror.domain.enums import UpsertAction
from trade_mirror.domain.income import IncomeEvent
from trade_mirror.domain.sync import SyncReport, UpsertResult
from trade_mirror.infra.notion import NotionApiError, NotionClient

from .mapping import map_balance_properties, map_trade_properties, memo_filter, with_key_in_memo

logger = logging.getLogger(__name__)


class SyncEngine:
    """Notion 미러링 엔진.

    Usage:
        engine = SyncEngine(notion, config)
        engine.update_balance(1234.5)
        report = engine.sync_income(events)
    """

    def __init__(self, notion: NotionClient, config: AppConfig):
        self._notion = notion
        self._config = config
        self._trades_db = config.notion.trades_db_id
        self._balance_db = config.notion.balance_db_id

    def upsert_trade(self, event: IncomeEvent) -> UpsertResult:
        """거래 1건 업서트. Notion 오류는 FAILED 결과로 반환."""
        key = event.unique_key
        props = with_key_in_memo(map_trade_properties(event, self._config.sync), key)

        try:
            existing = self._notion.query_database(self._trades_db, memo_filter(key))
            if existing:
                # 검색 결과 순서는 Notion 기본 정렬, 첫 건만 갱신
                page_id = existing[0]["id"]
                self._notion.update_page(page_id, props)
                logger.info("Trade updated: %s (page=%s)", key, page_id)
                return UpsertResult(unique_key=key, action=UpsertAction.UPDATED, page_id=page_id)

            page = self._notion.create_page(self._trades_db, props)
            logger.info("Trade created: %s (page=%s)", key, page.get("id"))
            return UpsertResult(unique_key=key, action=UpsertAction.CREATED, page_id=page.get("id"))
        except NotionApiError as e:
            logger.error("Trade upsert failed: %s — %s", key, e)
            return UpsertResult(unique_key=key, action=UpsertAction.FAILED, error=str(e))

    def update_balance(self, amount: float) -> str | None:
        """잔고 스냅샷 추가 (중복 제거 없음). 실패 시 None."""
        asset = self._config.binance.asset
        props = map_balance_properties(amount, asset, self._config.sync)
        try:
            page = self._notion.create_page(self._balance_db, props)
        except NotionApiError as e:
            logger.error("Balance snapshot failed: %s", e)
            return None
        logger.info("Balance snapshot: %s %s", amount, asset)
        return page.get("id")

    def sync_income(self, events: list[IncomeEvent], report: SyncReport | None = None) -> SyncReport:
        """income 이벤트를 순서대로 업서트. 페이싱은 NotionClient의 TokenBucket이 담당."""
        report = report or SyncReport(started_at=datetime.now(UTC))
        report.fetched += len(events)
        for event in events:
            report.add(self.upsert_trade(event))
        if report.failed:
            logger.warning("Income sync: %d/%d records failed", report.failed, len(events))
        return report

    def close(self) -> None:
        self._notion.close()
