"""Pydantic schemas for task endpoints."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from studio.domain.stages import TaskCategory, TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    project_id: UUID | None = None
    client_id: UUID | None = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.CONSULTATION
    due_date: date | None = None
    assigned_to: str | None = None
    visible_to_client: bool = False

    @model_validator(mode="after")
    def _require_owner(self) -> "TaskCreate":
        if self.project_id is None and self.client_id is None:
            raise ValueError("Task must be assigned to either a project or a client")
        return self


class TaskUpdate(BaseModel):
    """Partial task update. Only fields that are set are applied."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: TaskCategory | None = None
    due_date: date | None = None
    assigned_to: str | None = None
    visible_to_client: bool | None = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID | None
    client_id: UUID | None
    title: str
    description: str
    status: str
    priority: str
    category: str
    due_date: date | None
    assigned_to: str | None
    visible_to_client: bool
    created_at: datetime
