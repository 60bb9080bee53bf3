"""Project model: one interior design job moving through the pipeline."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, Uuid

from studio.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, nullable=True, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    # Pipeline stage: consultation, vision_board, ordering, installation, styling, complete
    status = Column(String(50), nullable=False, default="consultation", index=True)
    # Always derived from status + tasks; written only by ProjectProgressService
    progress = Column(Integer, nullable=False, default=0)

    budget = Column(Numeric(12, 2), nullable=False, default=0)
    spent = Column(Numeric(12, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    expected_completion = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
