"""Pydantic schemas for the overdue returns check."""

from datetime import datetime

from pydantic import BaseModel, Field


class OverdueReturnsResponse(BaseModel):
    message: str
    processed: int = Field(0, description="Overdue open returns examined")
    tasks_created: int = 0
    tasks_updated: int = 0
    timestamp: datetime
