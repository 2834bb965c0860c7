"""통합 설정 모델 — Pydantic Settings 기반.

모든 설정값은 환경 변수로 주입. 우선순위:
  1. 환경 변수 (Vercel/cron env, .env)
  2. Pydantic Settings 기본값

필수 비밀값 5개(Binance 키/시크릿, Notion 토큰, Notion DB ID 2개)는
AppConfig.missing_required()로 한 번에 검증하고, 클라이언트에는
설정 객체를 명시적으로 주입한다.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class BinanceConfig(BaseSettings):
    """Binance USDⓈ-M 선물 API 설정."""

    api_key: str = ""
    api_secret: str = ""
    base_url: str = "https://fapi.binance.com"
    asset: str = "USDT"
    income_limit: int = Field(default=50, ge=1, le=1000)
    timeout: float = 30.0

    model_config = {"env_prefix": "BINANCE_"}


class NotionConfig(BaseSettings):
    """Notion API 설정."""

    token: str = ""
    trades_db_id: str = ""
    balance_db_id: str = ""
    base_url: str = "https://api.notion.com/v1"
    version: str = "2022-06-28"
    # Notion 공식 레이트 리밋: 평균 초당 3회
    rate_per_sec: float = Field(default=3.0, gt=0)
    burst: int = Field(default=3, ge=1)
    timeout: float = 30.0

    model_config = {"env_prefix": "NOTION_"}


class RedisConfig(BaseSettings):
    """Redis 설정 (실행 락 전용)."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str = ""
    connect_timeout: float = Field(default=5.0, gt=0)
    socket_timeout: float = Field(default=5.0, gt=0)

    model_config = {"env_prefix": "REDIS_"}

    @property
    def url(self) -> str:
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class SyncConfig(BaseSettings):
    """동기화 실행 설정."""

    lock_enabled: bool = True
    lock_key: str = "trade-mirror:sync:lock"
    lock_ttl_seconds: int = 300  # 크래시한 실행이 락을 붙잡고 있는 최대 시간
    trigger_rate_limit: str = "6/minute"
    exchange_label: str = "Binance"
    strategy_label: str = "Other"
    fee_rate_pct: float = 0.1
    trade_memo: str = "API 자동 수집"
    balance_memo: str = "자동 스냅샷"

    model_config = {"env_prefix": "SYNC_"}


class AppConfig(BaseSettings):
    """최상위 설정 — 서브 설정 객체를 조합.

    Usage:
        from trade_mirror.domain.config import get_config
        config = get_config()
        missing = config.missing_required()
        if any(missing.values()):
            ...
    """

    env: str = Field(default="production", description="development | staging | production")
    log_level: str = "INFO"
    log_json: bool = True

    binance: BinanceConfig = Field(default_factory=BinanceConfig)
    notion: NotionConfig = Field(default_factory=NotionConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    model_config = {"env_prefix": "APP_"}

    def missing_required(self) -> dict[str, bool]:
        """필수 비밀값별 누락 여부 ({키: 누락이면 True})."""
        return {
            "binance_api_key": not self.binance.api_key,
            "binance_api_secret": not self.binance.api_secret,
            "notion_token": not self.notion.token,
            "notion_trades_db_id": not self.notion.trades_db_id,
            "notion_balance_db_id": not self.notion.balance_db_id,
        }

    @property
    def is_complete(self) -> bool:
        return not any(self.missing_required().values())


@lru_cache
def get_config() -> AppConfig:
    """싱글턴 설정 인스턴스.

    프로세스 내에서 한 번만 환경 변수를 읽고 캐싱.
    테스트에서는 get_config.cache_clear()로 초기화.
    """
    return AppConfig()
