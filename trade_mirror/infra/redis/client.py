"""Redis 클라이언트 팩토리 — 실행 락(RunLock) 전용 연결."""

from functools import lru_cache

import redis

from trade_mirror.domain.config import RedisConfig, get_config


def build_redis(config: RedisConfig) -> redis.Redis:
    """RedisConfig로 클라이언트 생성.

    락 조작(SET NX, WATCH/MULTI)만 하므로 타임아웃은 짧게 (REDIS_SOCKET_TIMEOUT).
    """
    return redis.Redis.from_url(
        config.url,
        decode_responses=True,
        socket_connect_timeout=config.connect_timeout,
        socket_timeout=config.socket_timeout,
        retry_on_timeout=True,
        client_name="trade-mirror",
    )


@lru_cache
def get_redis() -> redis.Redis:
    """프로세스 전역 Redis 클라이언트 (싱글턴).

    테스트에서는 get_redis.cache_clear() 후 재생성.
    """
    return build_redis(get_config().redis)
