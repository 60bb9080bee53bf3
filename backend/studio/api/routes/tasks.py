"""Task API routes. Writes recompute the owning project's progress."""

import uuid

from fastapi import APIRouter, HTTPException

from studio.core.exceptions import ProjectNotFoundError, TaskNotFoundError
from studio.db.base import get_session_factory
from studio.schemas.tasks import TaskCreate, TaskResponse, TaskUpdate
from studio.services.progress_service import ProjectProgressService

router = APIRouter()

# Fields a PATCH may clear with an explicit null
_NULLABLE_FIELDS = frozenset({"due_date", "assigned_to"})


@router.post("/", response_model=TaskResponse)
async def create_task(request: TaskCreate):
    factory = get_session_factory()
    async with factory() as session:
        try:
            task = await ProjectProgressService(session).add_task(request.model_dump())
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")
        return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: uuid.UUID, request: TaskUpdate):
    """Partial update; status/category changes refresh the project's progress."""
    updates = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_FIELDS
    }
    factory = get_session_factory()
    async with factory() as session:
        try:
            task = await ProjectProgressService(session).update_task(task_id, updates)
        except TaskNotFoundError:
            raise HTTPException(status_code=404, detail="Task not found")
        return TaskResponse.model_validate(task)
