"""Notion Sync Service — Binance → Notion 동기화 트리거 HTTP 엔드포인트.

외부 크론(Vercel cron, Airflow 등)이 주기적으로 /api/sync 호출.

실행:
    uvicorn trade_mirror.services.sync.app:app --host 0.0.0.0 --port 8090

Endpoints:
    GET|POST /api/sync          → 잔고 스냅샷 + 거래 업서트
    GET|POST /api/balance-sync  → 잔고 스냅샷만
    GET|POST /api/trade-log     → 거래 업서트만
    GET      /api/binance-sync  → 필수 설정 점검
    OPTIONS  /api/*             → 200 (빈 본문)
    GET      /health            → HealthStatus

응답 규칙:
    200 성공 / 400 필수 설정 누락 (missing 맵) / 409 다른 실행 진행 중 /
    429 트리거 레이트 리밋 / 500 Binance 실패 등 치명적 오류
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from fastapi import Depends, Request
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from trade_mirror.domain.config import AppConfig, get_config
from trade_mirror.domain.sync import SyncReport
from trade_mirror.infra.redis import SyncInProgressError
from trade_mirror.services.base import create_app
from trade_mirror.services.deps import get_app_config, get_sync_runner

from .runner import SyncRunner

logger = logging.getLogger(__name__)

# ─── Rate Limiter ────────────────────────────────────────────────

# 트리거 레이트 리밋 (IP가 아닌 서비스 전역)
_limiter = Limiter(key_func=lambda *args, **kwargs: "global_sync_trigger")


def _trigger_limit() -> str:
    return get_config().sync.trigger_rate_limit


# ─── App ─────────────────────────────────────────────────────────

app = create_app("notion-sync", version="1.0.0", dependencies=["redis", "binance", "notion"])

app.state.limiter = _limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": "Rate limit exceeded", "detail": str(exc.detail)},
    )


# ─── Helpers ─────────────────────────────────────────────────────


def _missing_config_response(config: AppConfig) -> JSONResponse | None:
    """필수 설정 누락 시 400 응답, 모두 있으면 None."""
    missing = config.missing_required()
    if not any(missing.values()):
        return None
    logger.warning("Missing required config: %s", [k for k, v in missing.items() if v])
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Required environment variables are not set",
            "missing": missing,
        },
    )


def _execute(name: str, config: AppConfig, action: Callable[[], SyncReport]) -> JSONResponse:
    """공통 실행 래퍼 — 설정 검증 → 실행 → 상태코드 매핑."""
    invalid = _missing_config_response(config)
    if invalid is not None:
        return invalid

    try:
        report = action()
    except SyncInProgressError as e:
        logger.warning("%s skipped: %s", name, e)
        return JSONResponse(status_code=409, content={"success": False, "error": str(e)})
    except Exception as e:
        logger.exception("%s failed", name)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": f"{name} completed",
            "report": report.model_dump(mode="json"),
        },
    )


# ─── Sync Endpoints ──────────────────────────────────────────────


@app.api_route("/api/sync", methods=["GET", "POST"])
@_limiter.limit(_trigger_limit)
def sync_all(
    request: Request,
    config: AppConfig = Depends(get_app_config),
    runner: SyncRunner = Depends(get_sync_runner),
) -> JSONResponse:
    """잔고 스냅샷 + 실현손익 업서트."""
    return _execute("sync", config, runner.run)


@app.api_route("/api/balance-sync", methods=["GET", "POST"])
@_limiter.limit(_trigger_limit)
def sync_balance(
    request: Request,
    config: AppConfig = Depends(get_app_config),
    runner: SyncRunner = Depends(get_sync_runner),
) -> JSONResponse:
    """잔고 스냅샷만 추가."""
    return _execute("balance-sync", config, runner.run_balance)


@app.api_route("/api/trade-log", methods=["GET", "POST"])
@_limiter.limit(_trigger_limit)
def sync_trade_log(
    request: Request,
    config: AppConfig = Depends(get_app_config),
    runner: SyncRunner = Depends(get_sync_runner),
) -> JSONResponse:
    """실현손익 업서트만 실행."""
    return _execute("trade-log", config, runner.run_trades)


@app.options("/api/{path:path}")
def api_options(path: str) -> Response:
    """프리플라이트 헤더 없는 OPTIONS도 200 (프리플라이트는 CORSMiddleware가 먼저 응답)."""
    return Response(status_code=200)


# ─── Config Check ────────────────────────────────────────────────


@app.get("/api/binance-sync")
def config_check(config: AppConfig = Depends(get_app_config)) -> JSONResponse:
    """필수 설정 점검 — 외부 API는 호출하지 않음."""
    invalid = _missing_config_response(config)
    if invalid is not None:
        return invalid

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Binance sync API is configured",
            "timestamp": datetime.now(UTC).isoformat(),
            "config": {
                "binance_api_configured": bool(config.binance.api_key and config.binance.api_secret),
                "notion_configured": bool(config.notion.token),
                "trades_db_configured": bool(config.notion.trades_db_id),
                "balance_db_configured": bool(config.notion.balance_db_id),
                "lock_enabled": config.sync.lock_enabled,
            },
        },
    )
