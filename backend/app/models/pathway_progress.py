"""PathwayProgress ORM — enrollment of one user in one pathway.

Invariants:
    - (user_id, pathway_id) is unique: enrolling twice is a no-op
    - current_step starts at 1; completed_at set once every required step is done
"""

import uuid
from datetime import datetime

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class PathwayProgress(Base):
    __tablename__ = "pathway_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "pathway_id", name="uq_progress_user_pathway"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    pathway_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pathways.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    completions: Mapped[list["StepCompletion"]] = relationship(
        "StepCompletion", lazy="selectin",
        cascade="all, delete-orphan", passive_deletes=True,
    )
