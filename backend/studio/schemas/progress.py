"""Pydantic schemas for progress and stage timeline responses."""

from pydantic import BaseModel, ConfigDict, Field

from studio.domain.stages import PipelineStage


class StageProgressResponse(BaseModel):
    """One timeline row. Completed stages read 100, future stages 0."""

    model_config = ConfigDict(from_attributes=True)

    stage: PipelineStage
    display_name: str
    progress: int = Field(..., ge=0, le=100)
    is_completed: bool
    is_current: bool
    task_count: int


class ProgressBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_progress: int = Field(..., ge=0, le=100)
    base_progress: int
    current_stage: str
    current_stage_progress: int
    current_stage_tasks: int
    completed_current_stage_tasks: int
    task_completion_ratio: float


class ProgressReportResponse(BaseModel):
    project_id: str
    status: str
    stage_name: str
    progress: int = Field(..., ge=0, le=100, description="Derived completion percentage")
    breakdown: ProgressBreakdownResponse
    timeline: list[StageProgressResponse] = Field(default_factory=list, description="Five non-terminal stages in pipeline order")


class StageInfo(BaseModel):
    stage: PipelineStage
    display_name: str
    base_progress: int
    stage_weight: int
