"""ProjectReturn model: merchandise sent back to a vendor for a project."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid

from studio.db.base import Base


class ProjectReturn(Base):
    __tablename__ = "returns"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False, index=True)
    client_id = Column(Uuid, nullable=True, index=True)

    reason = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default="pending")  # pending, processed, refunded, exchanged, completed
    amount = Column(Numeric(12, 2), nullable=True)
    return_date = Column(Date, nullable=False, index=True)
    processed_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
