"""Overdue return follow-up rules.

Pure domain functions: given the studio's returns and its existing follow-up
tasks, decide which follow-up tasks to create and which to escalate.
No DB access, `now` is injectable for testing.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from studio.domain.stages import TaskCategory, TaskPriority, TaskStatus

FOLLOW_UP_MARKER = "Return Follow-up"
URGENT_PREFIX = "URGENT: "

# Returns in these statuses are still waiting on the studio
OPEN_RETURN_STATUSES = frozenset({"pending", "processed"})
CLOSED_RETURN_STATUSES = frozenset({"exchanged", "refunded", "completed"})

_RETURN_ID_RE = re.compile(r"Return ID: ([a-f0-9-]+)")


@dataclass(frozen=True)
class FollowUpTask:
    """A follow-up task to insert for an untracked overdue return."""

    return_id: str
    project_id: Any
    client_id: Any
    title: str
    description: str
    priority: TaskPriority
    due_date: date
    days_overdue: int
    status: TaskStatus = TaskStatus.PENDING
    category: TaskCategory = TaskCategory.ADMINISTRATIVE
    visible_to_client: bool = False


@dataclass(frozen=True)
class Escalation:
    """An existing follow-up task that must be bumped to high priority."""

    task_id: Any
    return_id: str
    title: str
    days_overdue: int
    priority: TaskPriority = TaskPriority.HIGH


@dataclass
class FollowUpPlan:
    overdue_count: int = 0
    to_create: list[FollowUpTask] = field(default_factory=list)
    to_escalate: list[Escalation] = field(default_factory=list)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _status_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def utc_today(now: datetime) -> date:
    """Calendar date of `now` in UTC. A naive `now` is taken to be UTC already."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(timezone.utc).date()


def days_overdue(return_date: Any, now: datetime) -> int:
    """Whole days elapsed since midnight UTC of the return date."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime.combine(_as_date(return_date), time.min, tzinfo=timezone.utc)
    return (now - start) // timedelta(days=1)


def is_overdue(item: Any, now: datetime) -> bool:
    """True for an open return whose return date is strictly before today (UTC)."""
    if _status_value(_field(item, "status")) not in OPEN_RETURN_STATUSES:
        return False
    return _as_date(_field(item, "return_date")) < utc_today(now)


def tracked_return_ids(tasks: Iterable[Any]) -> dict[str, Any]:
    """Map return id -> first follow-up task that references it."""
    tracked: dict[str, Any] = {}
    for task in tasks:
        if FOLLOW_UP_MARKER not in (_field(task, "title") or ""):
            continue
        match = _RETURN_ID_RE.search(_field(task, "description") or "")
        if match and match.group(1) not in tracked:
            tracked[match.group(1)] = task
    return tracked


def follow_up_title(reason: str, urgent: bool) -> str:
    prefix = URGENT_PREFIX if urgent else ""
    return f"{prefix}{FOLLOW_UP_MARKER} - {reason}"


def plan_overdue_return_followups(
    returns: Iterable[Any],
    existing_tasks: Iterable[Any],
    now: datetime | None = None,
    urgent_after_days: int = 5,
    due_in_days: int = 2,
) -> FollowUpPlan:
    """Plan follow-up task creations and escalations for overdue returns.

    Pure function -- no side effects, no DB access.

    Args:
        returns: Return records (mappings or objects with id, project_id,
            client_id, reason, status, return_date)
        existing_tasks: Tasks already in the store (id, title, description, priority)
        now: Current time (injectable for testing, defaults to datetime.now(timezone.utc))
        urgent_after_days: Days overdue at which a follow-up becomes high priority
        due_in_days: Days from now until a new follow-up is due

    Returns:
        FollowUpPlan with tasks to create and tasks to escalate

    Rules:
        - Only open returns (pending, processed) dated before today are considered
        - A return already referenced by a follow-up task is never tracked twice
        - Tracked return >= urgent_after_days overdue and not high priority -> escalate
        - Untracked return -> new task, high + "URGENT: " when >= urgent_after_days, else medium
    """
    if now is None:
        now = datetime.now(timezone.utc)

    tracked = tracked_return_ids(existing_tasks)
    plan = FollowUpPlan()

    for item in returns:
        if _status_value(_field(item, "status")) in CLOSED_RETURN_STATUSES:
            continue
        if not is_overdue(item, now):
            continue

        plan.overdue_count += 1
        return_id = str(_field(item, "id"))
        reason = _field(item, "reason") or ""
        return_date = _as_date(_field(item, "return_date"))
        overdue = days_overdue(return_date, now)
        urgent = overdue >= urgent_after_days

        existing = tracked.get(return_id)
        if existing is not None:
            if urgent and _status_value(_field(existing, "priority")) != TaskPriority.HIGH.value:
                plan.to_escalate.append(Escalation(
                    task_id=_field(existing, "id"),
                    return_id=return_id,
                    title=follow_up_title(reason, urgent=True),
                    days_overdue=overdue,
                ))
            continue

        plan.to_create.append(FollowUpTask(
            return_id=return_id,
            project_id=_field(item, "project_id"),
            client_id=_field(item, "client_id"),
            title=follow_up_title(reason, urgent=urgent),
            description=(
                f"OVERDUE: Return request has been pending for {overdue} days past the return date. "
                f"Return ID: {return_id}. Reason: {reason}. "
                f"Original return date: {return_date.isoformat()}. "
                "Please process this return immediately or contact the client."
            ),
            priority=TaskPriority.HIGH if urgent else TaskPriority.MEDIUM,
            due_date=utc_today(now) + timedelta(days=due_in_days),
            days_overdue=overdue,
        ))

    return plan
