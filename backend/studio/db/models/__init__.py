"""Re-export all models so Base.metadata sees them."""

from studio.db.models.project import Project
from studio.db.models.project_return import ProjectReturn
from studio.db.models.task import Task

__all__ = [
    "Project",
    "ProjectReturn",
    "Task",
]
