"""Binance 선물 응답 모델 — income 이벤트, 자산 잔고."""

import time as _time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _now_ms() -> int:
    return int(_time.time() * 1000)


class IncomeEvent(BaseModel):
    """실현손익 income 이벤트 (GET /fapi/v1/income 한 행).

    income, qty는 Binance가 문자열로 내려주지만 float로 파싱.
    qty는 income 응답에 없는 필드라 대부분 None.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    symbol: str = "UNKNOWN"
    time: int = Field(default_factory=_now_ms)  # epoch ms (UTC)
    income: float = 0.0
    qty: Optional[float] = None
    income_type: Optional[str] = Field(default=None, alias="incomeType")
    asset: Optional[str] = None
    tran_id: Optional[int] = Field(default=None, alias="tranId")
    trade_id: Optional[str] = Field(default=None, alias="tradeId")

    @property
    def unique_key(self) -> str:
        return unique_key(self.symbol, self.time)


class AssetBalance(BaseModel):
    """자산별 잔고 (GET /fapi/v2/balance 한 행)."""

    model_config = ConfigDict(populate_by_name=True)

    asset: str
    balance: float = 0.0
    available_balance: Optional[float] = Field(default=None, alias="availableBalance")
    cross_un_pnl: Optional[float] = Field(default=None, alias="crossUnPnl")


def unique_key(symbol: str, event_time: int) -> str:
    """멱등성 키 = "{symbol}-{time}".

    같은 심볼에서 같은 ms에 체결된 두 건은 같은 키가 됨 (미처리).
    """
    return f"{symbol}-{event_time}"
