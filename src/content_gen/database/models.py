# src/content_gen/database/models.py

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FAQ(BaseModel):
    """Question and answer pair shown with an article"""
    question: str
    answer: str


class ArticleRecord(BaseModel):
    """Article as stored in the articles collection"""
    title: str
    slug: str = Field(pattern=r'^[a-z0-9-]+$')
    summary: str
    category: str
    status: str = 'draft'
    tags: List[str] = Field(default_factory=list)
    content_blocks: Dict[str, Any] = Field(default_factory=dict)
    faqs: Optional[List[FAQ]] = None
    title_embedding: Optional[List[float]] = None
    content_embedding: Optional[List[float]] = None
    summary_embedding: Optional[List[float]] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_document(self) -> Dict[str, Any]:
        """Document for MongoDB without unset optional fields"""
        return self.model_dump(exclude_none=True)


class FailedItem(BaseModel):
    """One item a batch operation had to skip"""
    item: str
    operation: str
    error: str


class BatchResult(BaseModel):
    """Outcome of a best-effort batch operation"""
    operation: str
    succeeded: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failed: List[FailedItem] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)

    @property
    def success_rate(self) -> float:
        return len(self.succeeded) / self.total if self.total else 0.0

    def record_success(self, item: str) -> None:
        self.succeeded.append(item)

    def record_skip(self, item: str, reason: str = '') -> None:
        logger.info(f"Skipped {item}{': ' + reason if reason else ''}")
        self.skipped.append(item)

    def record_failure(self, item: str, error: Any) -> None:
        logger.error(f"{self.operation} failed for {item}: {error}")
        self.failed.append(FailedItem(item=item, operation=self.operation, error=str(error)))
