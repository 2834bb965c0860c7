"""trade-mirror 도메인 모델 — 클라이언트/엔진/서비스 간 데이터 계약.

Usage:
    from trade_mirror.domain import IncomeEvent, SyncReport, TradeOutcome
    from trade_mirror.domain.config import AppConfig
"""

# --- Enums ---
from .enums import IncomeType, PositionSide, TradeOutcome, UpsertAction

# --- Exchange ---
from .income import AssetBalance, IncomeEvent, unique_key

# --- Sync ---
from .sync import SyncReport, UpsertResult

# --- Health ---
from .health import DependencyHealth, HealthStatus

__all__ = [
    # Enums
    "IncomeType",
    "PositionSide",
    "TradeOutcome",
    "UpsertAction",
    # Exchange
    "AssetBalance",
    "IncomeEvent",
    "unique_key",
    # Sync
    "SyncReport",
    "UpsertResult",
    # Health
    "DependencyHealth",
    "HealthStatus",
]
