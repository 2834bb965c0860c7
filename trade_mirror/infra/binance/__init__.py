"""Binance infrastructure — 서명 REST 클라이언트."""

from .client import BinanceApiError, BinanceClient, build_signed_query, sign_query

__all__ = ["BinanceApiError", "BinanceClient", "build_signed_query", "sign_query"]
