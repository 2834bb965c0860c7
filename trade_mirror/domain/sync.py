"""동기화 결과 모델."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .enums import UpsertAction


class UpsertResult(BaseModel):
    """거래 1건 업서트 결과."""

    unique_key: str
    action: UpsertAction
    page_id: Optional[str] = None
    error: Optional[str] = None


class SyncReport(BaseModel):
    """동기화 1회 실행 요약."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    balance: Optional[float] = None
    balance_written: bool = False
    fetched: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    results: list[UpsertResult] = Field(default_factory=list)

    def add(self, result: UpsertResult) -> None:
        self.results.append(result)
        if result.action == UpsertAction.CREATED:
            self.created += 1
        elif result.action == UpsertAction.UPDATED:
            self.updated += 1
        else:
            self.failed += 1
