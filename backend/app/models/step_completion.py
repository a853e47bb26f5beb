"""StepCompletion ORM — a user finished one step within one enrollment."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class StepCompletion(Base):
    __tablename__ = "step_completions"
    __table_args__ = (
        UniqueConstraint("progress_id", "step_id", name="uq_completion_progress_step"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    progress_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pathway_progress.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    step_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pathway_steps.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
