"""TokenBucket — Notion 요청 페이싱.

Notion은 통합(integration)당 평균 초당 3회를 허용. 고정 sleep 대신
요청마다 토큰을 하나씩 소비하고, 비어 있으면 다음 토큰까지 블로킹.
"""

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TokenBucket:
    """블로킹 토큰 버킷.

    Args:
        rate: 초당 충전 토큰 수
        capacity: 최대 보유 토큰 (버스트 크기)
        clock: 단조 시계 (테스트 주입용)
        sleep: 대기 함수 (테스트 주입용)
    """

    def __init__(
        self,
        rate: float,
        capacity: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._rate = rate
        self._capacity = float(capacity)
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._updated
        if elapsed > 0:
            self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        self._updated = now

    def acquire(self) -> float:
        """토큰 1개 소비. 대기한 시간(초) 반환."""
        waited = 0.0
        with self._lock:
            self._refill()
            if self._tokens < 1:
                waited = (1 - self._tokens) / self._rate
                logger.debug("Rate limit: waiting %.3fs", waited)
                self._sleep(waited)
                self._refill()
            # 부동소수 오차로 0.999...가 남을 수 있음
            self._tokens = max(0.0, self._tokens - 1)
        return waited

    @property
    def available(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens
