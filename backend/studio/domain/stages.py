"""Pipeline stage enums, static stage tables and category attribution.

Pure domain logic with no external dependencies.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


class PipelineStage(str, Enum):
    """Six-stage design pipeline. Declaration order is pipeline order."""

    CONSULTATION = "consultation"
    VISION_BOARD = "vision_board"
    ORDERING = "ordering"
    INSTALLATION = "installation"
    STYLING = "styling"
    COMPLETE = "complete"  # Terminal


class TaskCategory(str, Enum):
    """Task categories known to the studio."""

    CONSULTATION = "consultation"
    DESIGN = "design"
    ORDERING = "ordering"
    INSTALLATION = "installation"
    COMMUNICATION = "communication"
    ADMINISTRATIVE = "administrative"


class TaskStatus(str, Enum):
    """Task lifecycle: pending -> in_progress -> completed (or pending -> completed)."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class StageConfig:
    """Progress band owned by a stage: [base_progress, base_progress + stage_weight]."""

    base_progress: int
    stage_weight: int


PIPELINE_ORDER: tuple[PipelineStage, ...] = tuple(PipelineStage)

# Stages shown on the timeline (everything except the terminal stage)
NON_TERMINAL_STAGES: tuple[PipelineStage, ...] = PIPELINE_ORDER[:-1]

# Contiguous 20-point bands; the five non-terminal weights sum to 100
STAGE_CONFIG: MappingProxyType[PipelineStage, StageConfig] = MappingProxyType({
    PipelineStage.CONSULTATION: StageConfig(base_progress=0, stage_weight=20),
    PipelineStage.VISION_BOARD: StageConfig(base_progress=20, stage_weight=20),
    PipelineStage.ORDERING: StageConfig(base_progress=40, stage_weight=20),
    PipelineStage.INSTALLATION: StageConfig(base_progress=60, stage_weight=20),
    PipelineStage.STYLING: StageConfig(base_progress=80, stage_weight=20),
    PipelineStage.COMPLETE: StageConfig(base_progress=100, stage_weight=0),
})

# Which stage's progress a task counts towards, keyed by raw category string.
# Kept open: categories outside this table fall back to consultation.
TASK_CATEGORY_TO_STAGE: MappingProxyType[str, PipelineStage] = MappingProxyType({
    TaskCategory.CONSULTATION.value: PipelineStage.CONSULTATION,
    TaskCategory.DESIGN.value: PipelineStage.VISION_BOARD,
    TaskCategory.ORDERING.value: PipelineStage.ORDERING,
    TaskCategory.INSTALLATION.value: PipelineStage.INSTALLATION,
    TaskCategory.COMMUNICATION.value: PipelineStage.STYLING,
    TaskCategory.ADMINISTRATIVE.value: PipelineStage.CONSULTATION,
})

DEFAULT_TASK_STAGE = PipelineStage.CONSULTATION

STAGE_DISPLAY_NAMES: MappingProxyType[PipelineStage, str] = MappingProxyType({
    PipelineStage.CONSULTATION: "Initial Consultation",
    PipelineStage.VISION_BOARD: "Vision Board Creation",
    PipelineStage.ORDERING: "Ordering & Procurement",
    PipelineStage.INSTALLATION: "Installation Phase",
    PipelineStage.STYLING: "Final Styling",
    PipelineStage.COMPLETE: "Project Complete",
})

UNKNOWN_STAGE_NAME = "Unknown Stage"


def parse_stage(value: Any) -> PipelineStage | None:
    """Return the PipelineStage for a raw value, or None if it is not one of the six."""
    if isinstance(value, PipelineStage):
        return value
    try:
        return PipelineStage(value)
    except (ValueError, TypeError):
        return None


def stage_for_category(category: Any) -> PipelineStage:
    """Map a task category (enum member or raw string) to the stage it contributes to."""
    key = category.value if isinstance(category, Enum) else category
    if not isinstance(key, str):
        return DEFAULT_TASK_STAGE
    return TASK_CATEGORY_TO_STAGE.get(key, DEFAULT_TASK_STAGE)


def get_stage_display_name(stage: Any) -> str:
    """Human-readable label for a stage; "Unknown Stage" for anything unrecognized."""
    parsed = parse_stage(stage)
    if parsed is None:
        return UNKNOWN_STAGE_NAME
    return STAGE_DISPLAY_NAMES[parsed]


def get_next_stage(stage: Any) -> PipelineStage | None:
    """Stage following `stage` in pipeline order. None at complete or for unknown input."""
    parsed = parse_stage(stage)
    if parsed is None or parsed == PipelineStage.COMPLETE:
        return None
    return PIPELINE_ORDER[PIPELINE_ORDER.index(parsed) + 1]
