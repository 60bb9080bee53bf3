"""ReturnsService: turns overdue vendor returns into follow-up tasks.

Loads open returns dated before today plus existing follow-up tasks, asks the
pure planner what to do, then writes each creation/escalation in its own
transaction. A failed write is logged and skipped so one bad row cannot stop
the batch. Projects that gained a task get their progress recomputed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studio.core.config import get_settings
from studio.db.models.project_return import ProjectReturn
from studio.db.models.task import Task
from studio.domain.returns import (
    FOLLOW_UP_MARKER,
    OPEN_RETURN_STATUSES,
    plan_overdue_return_followups,
    utc_today,
)
from studio.services.progress_service import ProjectProgressService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OverdueReturnsResult:
    message: str
    processed: int
    tasks_created: int
    tasks_updated: int
    timestamp: datetime


class ReturnsService:
    """Batch job behind POST /api/returns/check-overdue and scripts/check_overdue_returns.py.

    Takes a session factory rather than a session: every write gets its own
    transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def check_overdue_returns(self, now: datetime | None = None) -> OverdueReturnsResult:
        """Create or escalate follow-up tasks for overdue returns.

        Args:
            now: Current time (injectable for testing, defaults to datetime.now(timezone.utc))

        Returns:
            OverdueReturnsResult with counts of examined returns and written tasks
        """
        settings = get_settings()
        now = now or datetime.now(timezone.utc)

        async with self.session_factory() as session:
            result = await session.execute(
                select(ProjectReturn).where(
                    ProjectReturn.status.in_(sorted(OPEN_RETURN_STATUSES)),
                    ProjectReturn.return_date < utc_today(now),
                )
            )
            overdue_returns = list(result.scalars().all())

            if not overdue_returns:
                logger.info("overdue_returns_none_found", now=now.isoformat())
                return OverdueReturnsResult(
                    message="No overdue returns found",
                    processed=0,
                    tasks_created=0,
                    tasks_updated=0,
                    timestamp=now,
                )

            result = await session.execute(
                select(Task).where(Task.title.contains(FOLLOW_UP_MARKER))
            )
            existing_tasks = list(result.scalars().all())

        plan = plan_overdue_return_followups(
            overdue_returns,
            existing_tasks,
            now=now,
            urgent_after_days=settings.returns_urgent_after_days,
            due_in_days=settings.returns_followup_due_days,
        )
        logger.info(
            "overdue_returns_planned",
            overdue=plan.overdue_count,
            to_create=len(plan.to_create),
            to_escalate=len(plan.to_escalate),
        )

        tasks_updated = 0
        for escalation in plan.to_escalate:
            try:
                async with self.session_factory() as session:
                    task = await session.get(Task, escalation.task_id)
                    if task is None:
                        continue
                    task.priority = escalation.priority.value
                    task.title = escalation.title
                    await session.commit()
                tasks_updated += 1
                logger.info(
                    "return_followup_escalated",
                    return_id=escalation.return_id,
                    task_id=str(escalation.task_id),
                    days_overdue=escalation.days_overdue,
                )
            except SQLAlchemyError as e:
                logger.error(
                    "return_followup_escalation_failed",
                    return_id=escalation.return_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        tasks_created = 0
        touched_projects = set()
        for follow_up in plan.to_create:
            try:
                async with self.session_factory() as session:
                    session.add(Task(
                        project_id=follow_up.project_id,
                        client_id=follow_up.client_id,
                        title=follow_up.title,
                        description=follow_up.description,
                        status=follow_up.status.value,
                        priority=follow_up.priority.value,
                        category=follow_up.category.value,
                        due_date=follow_up.due_date,
                        visible_to_client=follow_up.visible_to_client,
                    ))
                    await session.commit()
                tasks_created += 1
                if follow_up.project_id is not None:
                    touched_projects.add(follow_up.project_id)
                logger.info(
                    "return_followup_created",
                    return_id=follow_up.return_id,
                    priority=follow_up.priority.value,
                    days_overdue=follow_up.days_overdue,
                )
            except SQLAlchemyError as e:
                logger.error(
                    "return_followup_create_failed",
                    return_id=follow_up.return_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        # New follow-ups are administrative tasks, which count towards consultation
        for project_id in touched_projects:
            async with self.session_factory() as session:
                await ProjectProgressService(session).recompute_progress(project_id)

        outcome = OverdueReturnsResult(
            message="Overdue returns check completed",
            processed=len(overdue_returns),
            tasks_created=tasks_created,
            tasks_updated=tasks_updated,
            timestamp=now,
        )
        logger.info(
            "overdue_returns_check_completed",
            processed=outcome.processed,
            tasks_created=tasks_created,
            tasks_updated=tasks_updated,
        )
        return outcome
