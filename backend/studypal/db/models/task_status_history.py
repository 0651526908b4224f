"""Task status transition log ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import UUID

from studypal.db.base import Base


class TaskStatusHistory(Base):
    __tablename__ = "task_status_history"
    __table_args__ = (
        Index("ix_task_status_history_task_changed", "task_id", "changed_at"),
        Index("ix_task_status_history_user_id", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    task_id = Column(UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    from_status = Column(String(16), nullable=True)
    to_status = Column(String(16), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
