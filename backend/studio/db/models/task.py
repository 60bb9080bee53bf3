"""Task model: work items attributed to a pipeline stage through their category."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text, Uuid

from studio.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=True, index=True)
    client_id = Column(Uuid, nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(50), nullable=False, default="pending")  # pending, in_progress, completed
    priority = Column(String(20), nullable=False, default="medium")  # low, medium, high
    category = Column(String(50), nullable=False, default="consultation")
    due_date = Column(Date, nullable=True)
    assigned_to = Column(String(255), nullable=True)
    visible_to_client = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
