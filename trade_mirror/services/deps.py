"""FastAPI Depends 기반 DI — 서비스 공통 의존성 팩토리.

Usage:
    from trade_mirror.services.deps import get_sync_runner

    @app.post("/api/sync")
    def sync(runner: SyncRunner = Depends(get_sync_runner)):
        ...
"""

from collections.abc import Generator

from trade_mirror.domain.config import AppConfig, get_config
from trade_mirror.infra.redis import get_redis
from trade_mirror.services.sync.runner import SyncRunner, build_runner


def get_app_config() -> AppConfig:
    """프로세스 설정 (싱글턴)."""
    return get_config()


def get_sync_runner() -> Generator[SyncRunner, None, None]:
    """요청 스코프 SyncRunner. 응답 후 HTTP 클라이언트 종료."""
    config = get_config()
    redis_client = get_redis() if config.sync.lock_enabled else None
    runner = build_runner(config, redis_client)
    try:
        yield runner
    finally:
        runner.close()
