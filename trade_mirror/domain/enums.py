"""열거형 정의 — Notion select 옵션과 1:1 대응하는 상수값."""

from enum import StrEnum


class PositionSide(StrEnum):
    """포지션 방향 (실현손익 부호 기준)"""

    LONG = "Long"
    SHORT = "Short"


class TradeOutcome(StrEnum):
    """거래 결과"""

    WIN = "Win"
    LOSS = "Loss"
    BREAKEVEN = "BE"


class IncomeType(StrEnum):
    """Binance 선물 income 타입 (동기화 대상만)"""

    REALIZED_PNL = "REALIZED_PNL"


class UpsertAction(StrEnum):
    """거래 업서트 처리 결과"""

    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
