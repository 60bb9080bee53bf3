"""Project API routes: DB-backed, progress always recomputed server-side."""

import uuid

from fastapi import APIRouter, HTTPException

from studio.core.exceptions import ProjectNotFoundError, StageTransitionError
from studio.db.base import get_session_factory
from studio.db.models.project import Project
from studio.domain.stages import PipelineStage, get_next_stage, get_stage_display_name
from studio.schemas.progress import (
    ProgressBreakdownResponse,
    ProgressReportResponse,
    StageProgressResponse,
)
from studio.schemas.projects import (
    PipelineCard,
    PipelineColumn,
    ProjectCreate,
    ProjectResponse,
    StageUpdate,
)
from studio.schemas.tasks import TaskResponse
from studio.services.progress_service import ProjectProgressService

router = APIRouter()


def _project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        client_id=project.client_id,
        name=project.name,
        description=project.description,
        status=project.status,
        stage_name=get_stage_display_name(project.status),
        progress=project.progress,
        budget=project.budget,
        spent=project.spent,
        start_date=project.start_date,
        expected_completion=project.expected_completion,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.post("/", response_model=ProjectResponse)
async def create_project(request: ProjectCreate):
    """Create a project. Its initial progress comes from an empty task list."""
    factory = get_session_factory()
    async with factory() as session:
        project = await ProjectProgressService(session).create_project(request.model_dump())
        return _project_response(project)


@router.get("/", response_model=list[ProjectResponse])
async def list_projects(status: PipelineStage | None = None):
    """List projects, newest first, optionally filtered by stage."""
    factory = get_session_factory()
    async with factory() as session:
        projects = await ProjectProgressService(session).list_projects(status=status)
        return [_project_response(p) for p in projects]


@router.get("/pipeline", response_model=list[PipelineColumn])
async def get_pipeline():
    """Projects grouped into one column per stage, with live progress and task counts."""
    factory = get_session_factory()
    async with factory() as session:
        board = await ProjectProgressService(session).get_pipeline_board()
        return [
            PipelineColumn(
                stage=stage,
                display_name=get_stage_display_name(stage),
                projects=[
                    PipelineCard(
                        id=card.project.id,
                        name=card.project.name,
                        client_id=card.project.client_id,
                        progress=card.progress,
                        task_count=card.task_count,
                        completed_task_count=card.completed_task_count,
                        next_stage=get_next_stage(stage),
                    )
                    for card in cards
                ],
            )
            for stage, cards in board
        ]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: uuid.UUID):
    factory = get_session_factory()
    async with factory() as session:
        project = await ProjectProgressService(session).get_project(project_id)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return _project_response(project)


@router.patch("/{project_id}/stage", response_model=ProjectResponse)
async def move_project_stage(project_id: uuid.UUID, request: StageUpdate):
    """Move a project to any stage (forwards or backwards) and recompute progress."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            project = await ProjectProgressService(session).move_to_stage(project_id, request.status)
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")
        return _project_response(project)


@router.post("/{project_id}/advance", response_model=ProjectResponse)
async def advance_project_stage(project_id: uuid.UUID):
    """Move a project to the next stage. 409 once it is complete."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            project = await ProjectProgressService(session).advance_stage(project_id)
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")
        except StageTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _project_response(project)


@router.get("/{project_id}/progress", response_model=ProgressReportResponse)
async def get_project_progress(project_id: uuid.UUID):
    """Progress, current-stage breakdown and five-stage timeline, computed on demand."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            report = await ProjectProgressService(session).get_progress_report(project_id)
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")

        return ProgressReportResponse(
            project_id=str(project_id),
            status=report.project.status,
            stage_name=get_stage_display_name(report.project.status),
            progress=report.progress,
            breakdown=ProgressBreakdownResponse.model_validate(report.breakdown),
            timeline=[StageProgressResponse.model_validate(row) for row in report.timeline],
        )


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(project_id: uuid.UUID):
    factory = get_session_factory()
    async with factory() as session:
        try:
            tasks = await ProjectProgressService(session).list_tasks(project_id)
        except ProjectNotFoundError:
            raise HTTPException(status_code=404, detail="Project not found")
        return [TaskResponse.model_validate(t) for t in tasks]
