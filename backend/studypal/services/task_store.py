"""Read-only access to a user's stored tasks and their completion history."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy import asc, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studypal.db.models.task import Task
from studypal.db.models.task_status_history import TaskStatusHistory

logger = logging.getLogger(__name__)

COMPLETED_STATUS = "completed"


class TaskStoreUnavailableError(RuntimeError):
    """Raised when task rows cannot be read from the database."""


class TaskStore:
    """Thin query layer over the tasks and task_status_history tables."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_tasks_for_user(self, user_id: UUID) -> List[Task]:
        try:
            return (
                self.db.query(Task)
                .filter(Task.user_id == user_id)
                .order_by(asc(Task.created_at), asc(Task.id))
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to load tasks for user %s", user_id)
            raise TaskStoreUnavailableError("Unable to load tasks") from exc

    def list_completion_history(self, task_ids: Iterable[UUID]) -> Dict[UUID, List[TaskStatusHistory]]:
        """Return transitions into ``completed`` per task, newest first."""
        ids = list(task_ids)
        if not ids:
            return {}

        try:
            rows = (
                self.db.query(TaskStatusHistory)
                .filter(
                    TaskStatusHistory.task_id.in_(ids),
                    func.lower(func.trim(TaskStatusHistory.to_status)) == COMPLETED_STATUS,
                )
                .order_by(desc(TaskStatusHistory.changed_at))
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to load completion history for %d tasks", len(ids))
            raise TaskStoreUnavailableError("Unable to load task history") from exc

        history: Dict[UUID, List[TaskStatusHistory]] = defaultdict(list)
        for row in rows:
            history[row.task_id].append(row)
        return dict(history)
