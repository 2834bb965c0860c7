"""Notion REST API 클라이언트 — 데이터베이스 조회, 페이지 생성/수정.

모든 요청은 TokenBucket에서 토큰을 받은 뒤 전송 (Notion 레이트 리밋 준수).
실패는 NotionApiError로 변환해 호출자(SyncEngine)가 레코드 단위로 처리.

Reference: https://developers.notion.com/reference
"""

import logging
from typing import Any

import httpx

from trade_mirror.domain.config import NotionConfig

from .throttle import TokenBucket

logger = logging.getLogger(__name__)


class NotionApiError(Exception):
    """Notion API 오류."""

    def __init__(self, message: str, status_code: int | None = None, code: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class NotionClient:
    """Notion API 클라이언트.

    Usage:
        notion = NotionClient(config.notion)
        pages = notion.query_database(db_id, {"property": "메모", "rich_text": {"contains": "[BTCUSDT-1000]"}})
        notion.create_page(db_id, properties)
    """

    def __init__(
        self,
        config: NotionConfig,
        *,
        limiter: TokenBucket | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._config = config
        self._limiter = limiter or TokenBucket(config.rate_per_sec, config.burst)
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Notion-Version": config.version,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    # ─── Common Request ──────────────────────────────────────────

    def _request(self, method: str, path: str, *, json_data: dict[str, Any] | None = None) -> dict[str, Any]:
        self._limiter.acquire()
        try:
            resp = self._client.request(method, path, json=json_data)
        except httpx.HTTPError as e:
            raise NotionApiError(f"Notion request failed: {e}") from e

        if resp.is_error:
            code, message = _parse_error(resp)
            raise NotionApiError(message, status_code=resp.status_code, code=code)

        try:
            data = resp.json()
        except ValueError as e:
            raise NotionApiError(
                f"Malformed Notion response: HTTP {resp.status_code} {resp.text[:200]}",
                status_code=resp.status_code,
            ) from e
        if not isinstance(data, dict):
            raise NotionApiError(
                f"Unexpected Notion response type: {type(data).__name__}",
                status_code=resp.status_code,
            )
        return data

    # ─── Databases / Pages ───────────────────────────────────────

    def query_database(self, database_id: str, filter_: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """데이터베이스 조회 (첫 페이지 결과만)."""
        payload = {"filter": filter_} if filter_ else {}
        data = self._request("POST", f"/databases/{database_id}/query", json_data=payload)
        return data.get("results", [])

    def create_page(self, database_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        """데이터베이스 하위에 새 페이지 생성."""
        return self._request(
            "POST",
            "/pages",
            json_data={"parent": {"database_id": database_id}, "properties": properties},
        )

    def update_page(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        """기존 페이지 속성 패치."""
        return self._request("PATCH", f"/pages/{page_id}", json_data={"properties": properties})

    # ─── Health ──────────────────────────────────────────────────

    def ping(self) -> bool:
        """토큰 유효성 체크 (GET /users/me)."""
        try:
            self._request("GET", "/users/me")
            return True
        except NotionApiError:
            return False

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ─── Helpers ─────────────────────────────────────────────────────


def _parse_error(resp: httpx.Response) -> tuple[str, str]:
    """Notion 에러 바디 {"object": "error", "code": ..., "message": ...} 파싱."""
    try:
        body = resp.json()
    except ValueError:
        return "", f"HTTP {resp.status_code}: {resp.text[:200]}"
    if not isinstance(body, dict):
        return "", f"HTTP {resp.status_code}"
    return body.get("code") or "", body.get("message") or f"HTTP {resp.status_code}"
