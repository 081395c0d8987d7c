"""Schemas for Book-of-Business uploads."""

from typing import Optional

from pydantic import BaseModel, Field

from crosssell.schemas.scoring import BatchStatistics


class RowIssue(BaseModel):
    row: int = Field(..., description="1-based data row number")
    messages: list[str]


class UploadSummary(BaseModel):
    """Outcome of one upload."""

    upload_batch_id: str
    agency_id: Optional[str] = None
    dry_run: bool = False
    total_rows: int = 0
    valid_records: int = 0
    records_created: int = 0
    records_skipped: int = 0
    records_replaced: int = 0
    records_failed: int = 0
    parsing_errors: list[RowIssue] = Field(default_factory=list)
    parsing_warnings: list[RowIssue] = Field(default_factory=list)
    statistics: BatchStatistics
