"""trade-mirror — Binance 선물 실현손익/잔고 → Notion 데이터베이스 미러링."""

__version__ = "1.0.0"
