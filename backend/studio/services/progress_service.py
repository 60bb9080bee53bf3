"""ProjectProgressService: keeps project.progress derived from stage and tasks.

This is the integration point where the pure progress engine meets SQLAlchemy
models. Every mutation that can change a project's progress (stage move, task
added, task status or category changed) recomputes and stores the new value
before committing, so a persisted progress is never stale.
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studio.core.exceptions import ProjectNotFoundError, StageTransitionError, TaskNotFoundError
from studio.db.models.project import Project
from studio.db.models.task import Task
from studio.domain.progress import (
    ProgressBreakdown,
    StageProgress,
    calculate_project_progress,
    get_all_stage_progress,
    get_progress_breakdown,
)
from studio.domain.stages import (
    PIPELINE_ORDER,
    PipelineStage,
    TaskStatus,
    get_next_stage,
    parse_stage,
)

logger = structlog.get_logger(__name__)

# Task fields whose change can move the owning project's progress
_PROGRESS_FIELDS = frozenset({"status", "category", "project_id"})


@dataclass(frozen=True)
class ProgressReport:
    project: Project
    progress: int
    breakdown: ProgressBreakdown
    timeline: list[StageProgress]


@dataclass(frozen=True)
class BoardCard:
    project: Project
    progress: int
    task_count: int
    completed_task_count: int


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class ProjectProgressService:
    """Project and task writes with progress recomputation.

    Every public mutating method commits before returning.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load_project(self, project_id: uuid.UUID) -> Project:
        result = await self.session.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _load_tasks(self, project_id: uuid.UUID) -> list[Task]:
        result = await self.session.execute(select(Task).where(Task.project_id == project_id))
        return list(result.scalars().all())

    async def _apply_progress(self, project: Project) -> int:
        tasks = await self._load_tasks(project.id)
        progress = calculate_project_progress(project.status, tasks)
        if progress != project.progress:
            logger.info(
                "project_progress_changed",
                project_id=str(project.id),
                stage=project.status,
                old_progress=project.progress,
                new_progress=progress,
            )
        project.progress = progress
        return progress

    async def create_project(self, data: dict[str, Any]) -> Project:
        """Create a project. Progress is computed from an empty task list."""
        fields = {k: _enum_value(v) for k, v in data.items()}
        fields.setdefault("status", PipelineStage.CONSULTATION.value)
        project = Project(**fields)
        project.progress = calculate_project_progress(project.status, [])
        self.session.add(project)
        await self.session.commit()
        await self.session.refresh(project)

        logger.info("project_created", project_id=str(project.id), stage=project.status, progress=project.progress)
        return project

    async def get_project(self, project_id: uuid.UUID) -> Project | None:
        result = await self.session.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def list_projects(self, status: PipelineStage | None = None) -> list[Project]:
        query = select(Project).order_by(Project.created_at.desc())
        if status is not None:
            query = query.where(Project.status == status.value)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_tasks(self, project_id: uuid.UUID) -> list[Task]:
        await self._load_project(project_id)
        result = await self.session.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def move_to_stage(self, project_id: uuid.UUID, stage: PipelineStage) -> Project:
        """Move a project to any stage and recompute its progress.

        Moving backwards is allowed. Moving to the current stage changes nothing.
        """
        project = await self._load_project(project_id)
        target = PipelineStage(stage)

        if project.status == target.value:
            return project

        from_stage = project.status
        project.status = target.value
        progress = await self._apply_progress(project)
        await self.session.commit()
        await self.session.refresh(project)

        logger.info(
            "project_stage_changed",
            project_id=str(project_id),
            from_stage=from_stage,
            to_stage=target.value,
            progress=progress,
        )
        return project

    async def advance_stage(self, project_id: uuid.UUID) -> Project:
        """Move a project to the next pipeline stage.

        Raises:
            StageTransitionError: project is already complete, or its status is not a pipeline stage
        """
        project = await self._load_project(project_id)
        next_stage = get_next_stage(project.status)
        if next_stage is None:
            if parse_stage(project.status) is None:
                raise StageTransitionError(project.status, "not a pipeline stage")
            raise StageTransitionError(project.status, "no stage follows it")
        return await self.move_to_stage(project_id, next_stage)

    async def recompute_progress(self, project_id: uuid.UUID) -> int:
        """Recompute and persist progress for one project."""
        project = await self._load_project(project_id)
        progress = await self._apply_progress(project)
        await self.session.commit()
        return progress

    async def add_task(self, data: dict[str, Any]) -> Task:
        """Create a task and refresh its project's progress."""
        fields = {k: _enum_value(v) for k, v in data.items()}
        project = None
        if fields.get("project_id") is not None:
            project = await self._load_project(fields["project_id"])
            if fields.get("client_id") is None:
                fields["client_id"] = project.client_id

        task = Task(**fields)
        self.session.add(task)
        await self.session.flush()

        if project is not None:
            await self._apply_progress(project)

        await self.session.commit()
        await self.session.refresh(task)

        logger.info(
            "task_created",
            task_id=str(task.id),
            project_id=str(task.project_id) if task.project_id else None,
            category=task.category,
            status=task.status,
        )
        return task

    async def update_task(self, task_id: uuid.UUID, updates: dict[str, Any]) -> Task:
        """Apply a partial update to a task.

        Progress of the owning project (and of the previous owner if the task
        moved) is recomputed when status, category or project changes.
        """
        result = await self.session.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise TaskNotFoundError(task_id)

        previous_project_id = task.project_id
        changed = set()
        for key, value in updates.items():
            value = _enum_value(value)
            if getattr(task, key) != value:
                setattr(task, key, value)
                changed.add(key)

        await self.session.flush()

        if changed & _PROGRESS_FIELDS:
            affected = {pid for pid in (previous_project_id, task.project_id) if pid is not None}
            for pid in affected:
                await self._apply_progress(await self._load_project(pid))

        await self.session.commit()
        await self.session.refresh(task)

        if changed:
            logger.info("task_updated", task_id=str(task_id), fields=sorted(changed))
        return task

    async def get_progress_report(self, project_id: uuid.UUID) -> ProgressReport:
        """Progress, breakdown and stage timeline computed on demand from current rows."""
        project = await self._load_project(project_id)
        tasks = await self._load_tasks(project_id)
        return ProgressReport(
            project=project,
            progress=calculate_project_progress(project.status, tasks),
            breakdown=get_progress_breakdown(project.status, tasks),
            timeline=get_all_stage_progress(project.status, tasks),
        )

    async def get_pipeline_board(self) -> list[tuple[PipelineStage, list[BoardCard]]]:
        """All projects grouped by stage (all six columns, pipeline order)."""
        projects = await self.list_projects()
        result = await self.session.execute(select(Task).where(Task.project_id.is_not(None)))
        tasks_by_project: dict[uuid.UUID, list[Task]] = defaultdict(list)
        for task in result.scalars().all():
            tasks_by_project[task.project_id].append(task)

        columns: dict[PipelineStage, list[BoardCard]] = {stage: [] for stage in PIPELINE_ORDER}
        for project in projects:
            # Rows written outside this service may carry a missing or unknown status
            stage = parse_stage(project.status) or PipelineStage.CONSULTATION
            project_tasks = tasks_by_project.get(project.id, [])
            columns[stage].append(BoardCard(
                project=project,
                progress=calculate_project_progress(stage, project_tasks),
                task_count=len(project_tasks),
                completed_task_count=sum(1 for t in project_tasks if t.status == TaskStatus.COMPLETED.value),
            ))

        return [(stage, columns[stage]) for stage in PIPELINE_ORDER]
