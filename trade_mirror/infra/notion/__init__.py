"""Notion infrastructure — REST 클라이언트, 요청 페이싱."""

from .client import NotionApiError, NotionClient
from .throttle import TokenBucket

__all__ = ["NotionApiError", "NotionClient", "TokenBucket"]
