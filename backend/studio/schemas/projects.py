"""Pydantic schemas for project endpoints."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from studio.domain.stages import PipelineStage


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    client_id: UUID | None = None
    description: str = ""
    status: PipelineStage = PipelineStage.CONSULTATION
    budget: Decimal = Decimal("0")
    spent: Decimal = Decimal("0")
    start_date: date | None = None
    expected_completion: date | None = None


class StageUpdate(BaseModel):
    """Target stage for a pipeline move (drag onto a column)."""

    status: PipelineStage


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID | None
    name: str
    description: str
    # Stored value, echoed as-is; a row outside the pipeline reads "Unknown Stage"
    status: str
    stage_name: str = Field(..., description="Display name of the current stage")
    progress: int = Field(..., ge=0, le=100, description="Derived completion percentage (0-100)")
    budget: Decimal
    spent: Decimal
    start_date: date | None
    expected_completion: date | None
    created_at: datetime
    updated_at: datetime


class PipelineCard(BaseModel):
    """A project on the pipeline board with its live figures."""

    id: UUID
    name: str
    client_id: UUID | None
    progress: int = Field(..., ge=0, le=100)
    task_count: int
    completed_task_count: int
    next_stage: PipelineStage | None = None


class PipelineColumn(BaseModel):
    stage: PipelineStage
    display_name: str
    projects: list[PipelineCard] = Field(default_factory=list, description="Projects in this stage, empty array when none")
