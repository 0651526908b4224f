"""ORM models exposed for metadata discovery."""
from studypal.db.models.task import Task
from studypal.db.models.task_status_history import TaskStatusHistory
from studypal.db.models.user import User

__all__ = [
    "Task",
    "TaskStatusHistory",
    "User",
]
