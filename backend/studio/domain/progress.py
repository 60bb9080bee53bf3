"""Deterministic project progress computation.

A project's progress is the base of its current stage's band plus the
completion ratio of the tasks attributed to that stage, scaled by the stage
weight. Tasks may be mappings or objects exposing ``category`` and ``status``.
"""
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from studio.domain.stages import (
    NON_TERMINAL_STAGES,
    STAGE_CONFIG,
    PipelineStage,
    TaskStatus,
    get_stage_display_name,
    parse_stage,
    stage_for_category,
)

logger = structlog.get_logger(__name__)

# Timeline display value for a current stage that has no tasks yet.
# calculate_project_progress counts the same situation as 0.
EMPTY_CURRENT_STAGE_DISPLAY_PROGRESS = 50

# Ratio reported by get_progress_breakdown when the current stage has no tasks
EMPTY_STAGE_COMPLETION_RATIO = 0.5


@dataclass(frozen=True)
class ProgressResult:
    """Outcome of a progress evaluation. unknown_stage is set when the stage was not recognized."""

    percentage: int
    unknown_stage: bool = False


@dataclass(frozen=True)
class StageProgress:
    """One row of the stage timeline."""

    stage: PipelineStage
    display_name: str
    progress: int
    is_completed: bool
    is_current: bool
    task_count: int


@dataclass(frozen=True)
class ProgressBreakdown:
    total_progress: int
    base_progress: int
    current_stage: str
    current_stage_progress: int
    current_stage_tasks: int
    completed_current_stage_tasks: int
    task_completion_ratio: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (1.5 -> 2, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _task_field(task: Any, name: str) -> Any:
    if isinstance(task, Mapping):
        return task.get(name)
    return getattr(task, name, None)


def _is_completed(task: Any) -> bool:
    return _task_field(task, "status") == TaskStatus.COMPLETED


def tasks_for_stage(stage: PipelineStage, tasks: Iterable[Any]) -> list[Any]:
    """Tasks whose category attributes them to `stage`."""
    return [t for t in tasks if stage_for_category(_task_field(t, "category")) == stage]


def evaluate_project_progress(stage: Any, tasks: Iterable[Any]) -> ProgressResult:
    """Compute overall progress (0-100) without side effects.

    Args:
        stage: Project pipeline stage (PipelineStage or its string value)
        tasks: All tasks of the project; only category and status are read

    Returns:
        ProgressResult; an unrecognized stage yields percentage 0 with unknown_stage set

    Rules:
        - complete always yields 100, whatever the tasks
        - a stage with no attributed tasks contributes nothing beyond its base
        - rounding happens once, on the final sum
    """
    parsed = parse_stage(stage)
    if parsed is None:
        return ProgressResult(percentage=0, unknown_stage=True)

    if parsed == PipelineStage.COMPLETE:
        return ProgressResult(percentage=100)

    config = STAGE_CONFIG[parsed]
    current_stage_tasks = tasks_for_stage(parsed, tasks)

    current_stage_progress = 0.0
    if current_stage_tasks:
        completed = sum(1 for t in current_stage_tasks if _is_completed(t))
        completion_ratio = completed / len(current_stage_tasks)
        current_stage_progress = completion_ratio * config.stage_weight

    total = min(100.0, config.base_progress + current_stage_progress)
    return ProgressResult(percentage=round_half_up(total))


def calculate_project_progress(stage: Any, tasks: Iterable[Any]) -> int:
    """Overall project progress percentage (0-100).

    Never raises. An unrecognized stage is logged as a warning and yields 0.
    """
    result = evaluate_project_progress(stage, tasks)
    if result.unknown_stage:
        logger.warning("unknown_project_stage", stage=str(stage))
    return result.percentage


def get_all_stage_progress(stage: Any, tasks: Iterable[Any]) -> list[StageProgress]:
    """Per-stage timeline rows for the five non-terminal stages, in pipeline order.

    Stages before the current one (or all of them once the project is complete)
    are completed at 100. The current stage shows the completion percentage of
    its attributed tasks, or 50 when it has none. Later stages show 0.
    """
    task_list = list(tasks)
    parsed = parse_stage(stage)
    is_complete = parsed == PipelineStage.COMPLETE
    current_index = NON_TERMINAL_STAGES.index(parsed) if parsed in NON_TERMINAL_STAGES else -1

    rows: list[StageProgress] = []
    for index, row_stage in enumerate(NON_TERMINAL_STAGES):
        stage_tasks = tasks_for_stage(row_stage, task_list)
        is_completed = is_complete or index < current_index
        is_current = not is_complete and index == current_index

        progress = 0
        if is_completed:
            progress = 100
        elif is_current:
            if stage_tasks:
                completed = sum(1 for t in stage_tasks if _is_completed(t))
                progress = round_half_up(completed / len(stage_tasks) * 100)
            else:
                progress = EMPTY_CURRENT_STAGE_DISPLAY_PROGRESS

        rows.append(StageProgress(
            stage=row_stage,
            display_name=get_stage_display_name(row_stage),
            progress=progress,
            is_completed=is_completed,
            is_current=is_current,
            task_count=len(stage_tasks),
        ))

    return rows


def get_progress_breakdown(stage: Any, tasks: Iterable[Any]) -> ProgressBreakdown:
    """Detailed figures behind calculate_project_progress for the current stage."""
    task_list = list(tasks)
    total_progress = calculate_project_progress(stage, task_list)
    parsed = parse_stage(stage)

    if parsed is None:
        return ProgressBreakdown(
            total_progress=total_progress,
            base_progress=0,
            current_stage=str(stage),
            current_stage_progress=total_progress,
            current_stage_tasks=0,
            completed_current_stage_tasks=0,
            task_completion_ratio=EMPTY_STAGE_COMPLETION_RATIO,
        )

    base_progress = STAGE_CONFIG[parsed].base_progress
    current_stage_tasks = tasks_for_stage(parsed, task_list)
    completed = sum(1 for t in current_stage_tasks if _is_completed(t))

    return ProgressBreakdown(
        total_progress=total_progress,
        base_progress=base_progress,
        current_stage=parsed.value,
        current_stage_progress=total_progress - base_progress,
        current_stage_tasks=len(current_stage_tasks),
        completed_current_stage_tasks=completed,
        task_completion_ratio=(
            completed / len(current_stage_tasks)
            if current_stage_tasks
            else EMPTY_STAGE_COMPLETION_RATIO
        ),
    )
