"""Schemas for customer-insight records and opportunity matching."""

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


MatchMethod = Literal["customer_id", "exact_name", "fuzzy_name"]


class CustomerInsight(BaseModel):
    """Household-level customer record kept alongside opportunities."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    agency_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: str = Field(..., min_length=1)
    total_premium: float = Field(0.0, ge=0)
    policy_count: int = Field(1, ge=0)


class CustomerMatch(BaseModel):
    """A customer-insight record matched to an opportunity."""

    insight: CustomerInsight
    method: MatchMethod
    score: float = Field(100.0, ge=0, le=100, description="Name similarity, 100 for key joins")
