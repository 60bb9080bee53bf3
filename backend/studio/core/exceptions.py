class StudioError(Exception):
    """Base exception for the studio backend."""

    pass


class ProjectNotFoundError(StudioError):
    """Raised when a project id does not match any stored project."""

    def __init__(self, project_id):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class TaskNotFoundError(StudioError):
    """Raised when a task id does not match any stored task."""

    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class StageTransitionError(StudioError):
    """Raised when a project cannot move to the requested stage."""

    def __init__(self, current_stage: str, reason: str):
        self.current_stage = current_stage
        self.reason = reason
        super().__init__(f"Cannot leave stage '{current_stage}': {reason}")
