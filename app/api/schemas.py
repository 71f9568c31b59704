"""
API Response Schemas

This module defines the Pydantic models for the admin log query responses.
Separated from endpoints to keep concerns separated and enable reuse.
"""

from typing import Any

from pydantic import BaseModel, Field


class VisitorLogsResponse(BaseModel):
    """Successful admin log query."""
    success: bool = True
    count: int = Field(..., description="Number of rows in this page")
    logs: list[dict[str, Any]] = Field(default_factory=list, description="Visitor rows, newest first")


class ErrorResponse(BaseModel):
    """Failed admin log query."""
    success: bool = False
    error: str
    message: str
