"""RunLock — 동기화 실행 직렬화용 Redis 락.

조회 후 생성(query-then-write)은 원자적이지 않아서 두 실행이 겹치면
같은 이벤트 페이지가 중복 생성될 수 있음. 실행 단위로 SET NX PX 락을 잡아
겹치는 실행을 거절한다. TTL이 지나면 크래시한 보유자의 락은 자동 해제.

Usage:
    lock = RunLock(get_redis(), "trade-mirror:sync:lock", ttl_seconds=300)
    with lock:
        run()
"""

import logging
import uuid

import redis

logger = logging.getLogger(__name__)


class SyncInProgressError(Exception):
    """다른 실행이 락을 보유 중."""


class RunLock:
    """비블로킹 Redis 락 (소유 토큰 비교 후 해제)."""

    def __init__(self, client: redis.Redis, key: str, ttl_seconds: int = 300):
        self._client = client
        self._key = key
        self._ttl_ms = ttl_seconds * 1000
        self._token: str | None = None

    @property
    def key(self) -> str:
        return self._key

    def acquire(self) -> bool:
        """락 획득 시도. 이미 잡혀 있으면 False."""
        token = uuid.uuid4().hex
        if self._client.set(self._key, token, nx=True, px=self._ttl_ms):
            self._token = token
            logger.debug("Run lock acquired: %s", self._key)
            return True
        return False

    def release(self) -> bool:
        """내가 잡은 락만 해제. TTL 만료 후 다른 실행이 잡았으면 건드리지 않음."""
        if self._token is None:
            return False
        token, self._token = self._token, None

        with self._client.pipeline() as pipe:
            try:
                pipe.watch(self._key)
                current = pipe.get(self._key)
                if isinstance(current, bytes):
                    current = current.decode()
                if current != token:
                    pipe.unwatch()
                    logger.warning("Run lock %s expired before release", self._key)
                    return False
                pipe.multi()
                pipe.delete(self._key)
                pipe.execute()
                return True
            except redis.WatchError:
                logger.warning("Run lock %s changed during release", self._key)
                return False

    def __enter__(self) -> "RunLock":
        if not self.acquire():
            raise SyncInProgressError(f"Another sync run holds {self._key}")
        return self

    def __exit__(self, *args) -> None:
        self.release()
