"""Shared API envelope schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    """Metadata attached to every API response."""

    timestamp: datetime = Field(..., description="Server time the response was built")
    request_id: str = Field(..., description="Correlation id for the request")
    api_version: str = Field("v1", description="API version that served the request")


class ApiResponse(BaseModel):
    """Standard success envelope."""

    status: bool = Field(True, description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")
    data: dict[str, Any] = Field(default_factory=dict, description="Response payload")
    meta: ResponseMeta


class ErrorDetail(BaseModel):
    """RFC 7807 problem detail."""

    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    request_id: str
    timestamp: datetime
