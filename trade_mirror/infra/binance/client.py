"""Binance USDⓈ-M 선물 REST API 직접 호출 래퍼.

서명 GET 요청 (HMAC-SHA256) 으로 잔고와 실현손익 income 이력을 조회.
재시도 없음 — 실패는 BinanceApiError로 호출자에게 전파되어 실행 전체를 중단.

Reference: https://binance-docs.github.io/apidocs/futures/en/
"""

import hashlib
import hmac
import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

import httpx

from trade_mirror.domain.config import BinanceConfig
from trade_mirror.domain.enums import IncomeType
from trade_mirror.domain.income import AssetBalance, IncomeEvent

logger = logging.getLogger(__name__)

BALANCE_PATH = "/fapi/v2/balance"
INCOME_PATH = "/fapi/v1/income"
PING_PATH = "/fapi/v1/ping"


class BinanceApiError(Exception):
    """Binance API 오류."""

    def __init__(self, message: str, status_code: int | None = None, code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def sign_query(secret: str, query: str) -> str:
    """쿼리 문자열 그대로에 대한 HMAC-SHA256 hex digest."""
    return hmac.new(secret.encode(), query.encode(), hashlib.sha256).hexdigest()


def build_signed_query(secret: str, params: dict[str, Any], timestamp_ms: int) -> str:
    """timestamp + params(삽입 순서) 쿼리에 signature를 마지막 파라미터로 덧붙임.

    서명 대상 문자열과 전송 문자열이 바이트 단위로 같아야 하므로
    파라미터 순서를 바꾸거나 재인코딩하면 안 된다.
    """
    query = urlencode({"timestamp": str(timestamp_ms), **params})
    return f"{query}&signature={sign_query(secret, query)}"


class BinanceClient:
    """Binance 선물 서명 요청 클라이언트.

    Usage:
        client = BinanceClient(config.binance)
        usdt = client.fetch_balance()
        events = client.fetch_income(limit=50)
    """

    def __init__(
        self,
        config: BinanceConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._config = config
        self._clock = clock
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            headers={"X-MBX-APIKEY": config.api_key},
            transport=transport,
        )

    # ─── Common Request ──────────────────────────────────────────

    def _signed_get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """서명 GET. URL을 직접 조립해 서명한 쿼리를 그대로 전송."""
        timestamp_ms = int(self._clock() * 1000)
        query = build_signed_query(self._config.api_secret, params or {}, timestamp_ms)

        try:
            resp = self._client.get(f"{path}?{query}")
        except httpx.HTTPError as e:
            raise BinanceApiError(f"Binance request failed: {e}") from e

        if resp.is_error:
            code, msg = _parse_error(resp)
            raise BinanceApiError(msg, status_code=resp.status_code, code=code)

        return resp.json()

    # ─── Account ─────────────────────────────────────────────────

    def get_balances(self) -> list[AssetBalance]:
        """자산별 선물 지갑 잔고."""
        data = self._signed_get(BALANCE_PATH)
        return [AssetBalance.model_validate(row) for row in data]

    def fetch_balance(self) -> float:
        """설정된 자산(기본 USDT) 잔고. 응답에 없으면 0."""
        for bal in self.get_balances():
            if bal.asset == self._config.asset:
                return bal.balance
        logger.warning("Asset %s not found in balance response, using 0", self._config.asset)
        return 0.0

    # ─── Income ──────────────────────────────────────────────────

    def fetch_income(self, limit: int | None = None) -> list[IncomeEvent]:
        """실현손익 income 최근 limit건. 업스트림 순서 유지, 페이지네이션 없음."""
        data = self._signed_get(
            INCOME_PATH,
            {
                "incomeType": IncomeType.REALIZED_PNL,
                "limit": limit if limit is not None else self._config.income_limit,
            },
        )
        events = [IncomeEvent.model_validate(row) for row in data]
        logger.info("Fetched %d income events", len(events))
        return events

    # ─── Health ──────────────────────────────────────────────────

    def ping(self) -> bool:
        """서명 없는 연결 체크."""
        try:
            resp = self._client.get(PING_PATH)
            return resp.status_code == 200
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ─── Helpers ─────────────────────────────────────────────────────


def _parse_error(resp: httpx.Response) -> tuple[int | None, str]:
    """Binance 에러 바디 {"code": -2015, "msg": "..."} 파싱."""
    try:
        body = resp.json()
    except ValueError:
        return None, f"HTTP {resp.status_code}: {resp.text[:200]}"
    if not isinstance(body, dict):
        return None, f"HTTP {resp.status_code}"
    return body.get("code"), body.get("msg") or f"HTTP {resp.status_code}"
