"""Mock Binance / Notion — E2E 테스트용 httpx MockTransport."""

from .app import create_binance_transport, create_notion_transport
from .state import UpstreamState, memo_text

__all__ = ["UpstreamState", "create_binance_transport", "create_notion_transport", "memo_text"]
