"""Schemas for task linking."""

from datetime import date
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from crosssell.schemas.customer import MatchMethod
from crosssell.schemas.segmentation import SegmentTier


TaskPriority = Literal["urgent", "high", "medium", "low"]


class TaskLinkRequest(BaseModel):
    task_id: str = Field(..., min_length=1, description="Identifier of the task created for the opportunity")
    text: Optional[str] = Field(None, description="Custom task text")


class TaskDraft(BaseModel):
    """Task content built from an opportunity, ready for a task system."""

    opportunity_id: UUID
    task_id: str
    text: str
    priority: TaskPriority
    due_date: Optional[date] = None
    customer_name: str
    customer_segment: SegmentTier
    customer_insight_id: Optional[UUID] = None
    customer_match_method: Optional[MatchMethod] = None
    notes: str
