"""Binance income → Notion 속성 매핑 (순수 함수).

Notion 데이터베이스 속성명은 사용자 DB 스키마 그대로 (한글).
진입가/청산가/수익률/수수료/레버리지는 income 이벤트에 없어서 항상 null.
"""

from datetime import UTC, datetime, timedelta, timezone
from typing import Any

from trade_mirror.domain.config import SyncConfig
from trade_mirror.domain.enums import PositionSide, TradeOutcome
from trade_mirror.domain.income import IncomeEvent

KST = timezone(timedelta(hours=9), name="KST")

# ─── 거래 DB 속성명 ──────────────────────────────────────────────

PROP_TICKER = "티커"
PROP_CLOSED_AT = "체결 시간"
PROP_SIDE = "포지션"
PROP_QTY = "수량"
PROP_ENTRY_PRICE = "진입가"
PROP_EXIT_PRICE = "청산가"
PROP_REALIZED = "실현손익"
PROP_RETURN_PCT = "수익률%"
PROP_OUTCOME = "결과"
PROP_EXCHANGE = "거래소"
PROP_STRATEGY = "전략"
PROP_FEE = "수수료"
PROP_LEVERAGE = "레버리지"
PROP_LIVE = "실거래"
PROP_MEMO = "메모"
PROP_FEE_RATE = "수수료율%"

# ─── 잔고 DB 속성명 ──────────────────────────────────────────────

PROP_ASSET_NAME = "자산명"
PROP_CURRENCY = "통화"
PROP_BALANCE = "현재 잔고"
PROP_AS_OF = "기준일"


def classify_outcome(amount: float) -> TradeOutcome:
    if amount > 0:
        return TradeOutcome.WIN
    if amount < 0:
        return TradeOutcome.LOSS
    return TradeOutcome.BREAKEVEN


def position_side(amount: float) -> PositionSide:
    """실현손익 부호로 포지션 추정. 0은 Long."""
    return PositionSide.LONG if amount >= 0 else PositionSide.SHORT


def to_kst(utc_ms: int) -> datetime:
    """epoch ms(UTC) → KST(UTC+9) aware datetime."""
    return datetime.fromtimestamp(utc_ms / 1000, tz=UTC).astimezone(KST)


def _title(text: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": text}}]}


def _rich_text(text: str) -> dict[str, Any]:
    return {"rich_text": [{"text": {"content": text}}]}


def _select(name: str) -> dict[str, Any]:
    return {"select": {"name": name}}


def _number(value: float | None) -> dict[str, Any]:
    return {"number": value}


def _date(value: datetime) -> dict[str, Any]:
    return {"date": {"start": value.isoformat()}}


def memo_tag(unique_key: str) -> str:
    """메모에 기록하는 키 표기. 대괄호까지 포함해야 "BTCUSDT-1000"이 "BTCUSDT-10000"에 매칭되지 않음."""
    return f"[{unique_key}]"


def memo_filter(unique_key: str) -> dict[str, Any]:
    """메모 필드에 키 표기가 포함된 페이지 검색 필터."""
    return {"property": PROP_MEMO, "rich_text": {"contains": memo_tag(unique_key)}}


def with_key_in_memo(properties: dict[str, Any], unique_key: str) -> dict[str, Any]:
    """메모 끝에 " [unique_key]"를 붙인 사본. 생성과 갱신 모두 적용해야 다음 실행에서 검색됨."""
    memo = properties[PROP_MEMO]["rich_text"][0]["text"]["content"]
    return {**properties, PROP_MEMO: _rich_text(f"{memo} {memo_tag(unique_key)}")}


def map_trade_properties(event: IncomeEvent, config: SyncConfig) -> dict[str, Any]:
    """income 이벤트 → 거래 DB 페이지 속성."""
    realized = float(event.income)
    return {
        PROP_TICKER: _title(event.symbol),
        PROP_CLOSED_AT: _date(to_kst(event.time)),
        PROP_SIDE: _select(position_side(realized)),
        PROP_QTY: _number(float(event.qty or 0)),
        PROP_ENTRY_PRICE: _number(None),
        PROP_EXIT_PRICE: _number(None),
        PROP_REALIZED: _number(realized),
        PROP_RETURN_PCT: _number(None),
        PROP_OUTCOME: _select(classify_outcome(realized)),
        PROP_EXCHANGE: {"multi_select": [{"name": config.exchange_label}]},
        PROP_STRATEGY: _select(config.strategy_label),
        PROP_FEE: _number(None),
        PROP_LEVERAGE: _number(None),
        PROP_LIVE: {"checkbox": True},
        PROP_MEMO: _rich_text(config.trade_memo),
        PROP_FEE_RATE: _number(config.fee_rate_pct),
    }


def map_balance_properties(
    amount: float,
    asset: str,
    config: SyncConfig,
    now: datetime | None = None,
) -> dict[str, Any]:
    """잔고 스냅샷 → 잔고 DB 페이지 속성."""
    as_of = now or datetime.now(KST)
    return {
        PROP_ASSET_NAME: _title(f"{config.exchange_label} {asset}"),
        PROP_CURRENCY: _select(asset),
        PROP_BALANCE: _number(amount),
        PROP_AS_OF: _date(as_of),
        PROP_MEMO: _rich_text(config.balance_memo),
    }
