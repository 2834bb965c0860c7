"""FastAPI 앱 팩토리 — 공통 헬스체크, 에러 핸들러, CORS.

Usage:
    from trade_mirror.services.base import create_app

    app = create_app("notion-sync", version="1.0.0", dependencies=["redis", "binance", "notion"])
"""

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from trade_mirror.domain.config import get_config
from trade_mirror.domain.health import DependencyHealth, HealthStatus
from trade_mirror.infra.observability import setup_logging

logger = logging.getLogger(__name__)

# 서비스 시작 시각 (uptime 계산용)
_start_time: float = 0.0


def create_app(
    service_name: str,
    *,
    version: str = "1.0.0",
    lifespan: Callable | None = None,
    dependencies: list[str] | None = None,
) -> FastAPI:
    """FastAPI 앱 팩토리.

    Args:
        service_name: 서비스 식별자 (예: "notion-sync")
        version: 서비스 버전
        lifespan: 커스텀 lifespan context manager (startup/shutdown)
        dependencies: 헬스체크에 포함할 의존성 목록 ("redis", "binance", "notion")
    """
    deps = dependencies or []

    @asynccontextmanager
    async def wrapped_lifespan(app: FastAPI) -> AsyncIterator[None]:
        global _start_time
        _start_time = time.monotonic()
        config = get_config()
        setup_logging(service_name, log_level=config.log_level, json_output=config.log_json)
        logger.info("[%s] Starting v%s", service_name, version)
        if lifespan:
            async with lifespan(app):
                yield
        else:
            yield
        logger.info("[%s] Shutting down", service_name)

    app = FastAPI(
        title=f"trade-mirror {service_name}",
        version=version,
        lifespan=wrapped_lifespan,
    )

    # 외부 크론/대시보드에서 직접 호출
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # --- Error Handlers ---

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Validation error", "detail": exc.errors()},
        )

    # --- Health Check ---

    @app.get("/health")
    def health() -> HealthStatus:
        dep_health: dict[str, DependencyHealth] = {}
        overall = "healthy"

        for dep in deps:
            dep_health[dep] = _check_dependency(dep)
            if dep_health[dep].status == "down":
                overall = "unhealthy"
            elif dep_health[dep].status == "degraded" and overall == "healthy":
                overall = "degraded"

        return HealthStatus(
            service=service_name,
            status=overall,
            uptime_seconds=time.monotonic() - _start_time,
            version=version,
            config_complete=get_config().is_complete,
            dependencies=dep_health,
            timestamp=datetime.now(UTC),
        )

    return app


def _check_dependency(name: str) -> DependencyHealth:
    """의존성 상태 체크."""
    start = time.monotonic()
    config = get_config()
    try:
        if name == "redis":
            from trade_mirror.infra.redis import get_redis

            get_redis().ping()
        elif name == "binance":
            from trade_mirror.infra.binance import BinanceClient

            with BinanceClient(config.binance) as client:
                if not client.ping():
                    return DependencyHealth(
                        status="down",
                        latency_ms=round((time.monotonic() - start) * 1000, 1),
                        message="Binance API unreachable",
                    )
        elif name == "notion":
            from trade_mirror.infra.notion import NotionClient

            with NotionClient(config.notion) as client:
                if not client.ping():
                    return DependencyHealth(
                        status="down",
                        latency_ms=round((time.monotonic() - start) * 1000, 1),
                        message="Notion API unreachable or token rejected",
                    )
        else:
            return DependencyHealth(status="healthy", message=f"Unknown dep: {name}")

        latency = (time.monotonic() - start) * 1000
        status = "healthy" if latency < 1000 else "degraded"
        return DependencyHealth(status=status, latency_ms=round(latency, 1))

    except Exception as e:
        latency = (time.monotonic() - start) * 1000
        return DependencyHealth(
            status="down",
            latency_ms=round(latency, 1),
            message=str(e)[:200],
        )
