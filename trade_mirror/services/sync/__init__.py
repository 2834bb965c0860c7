"""Binance → Notion Sync 서비스."""

from .engine import SyncEngine
from .mapping import classify_outcome, map_balance_properties, map_trade_properties, position_side, to_kst
from .runner import SyncRunner, build_runner

__all__ = [
    "SyncEngine",
    "SyncRunner",
    "build_runner",
    "classify_outcome",
    "map_balance_properties",
    "map_trade_properties",
    "position_side",
    "to_kst",
]
