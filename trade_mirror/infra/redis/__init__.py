"""Redis infrastructure — client, 실행 락."""

from .client import build_redis, get_redis
from .lock import RunLock, SyncInProgressError

__all__ = ["build_redis", "get_redis", "RunLock", "SyncInProgressError"]
