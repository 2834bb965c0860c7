"""헬스 체크 모델."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class DependencyHealth(BaseModel):
    """업스트림(redis, binance, notion) 상태."""

    status: Literal["healthy", "degraded", "down"]
    latency_ms: float | None = None
    message: str | None = None


class HealthStatus(BaseModel):
    """서비스 헬스 상태."""

    service: str
    status: Literal["healthy", "degraded", "unhealthy"]
    uptime_seconds: float
    version: str = "1.0.0"
    config_complete: bool = True
    dependencies: dict[str, DependencyHealth] = {}
    timestamp: datetime
