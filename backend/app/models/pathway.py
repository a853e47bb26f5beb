"""Pathway ORM — an ordered discipleship track offered by a church.

Invariants:
    - steps ordered by `order` (1-based, contiguous after every write)
    - deleted with the church; steps and enrollments deleted with the pathway
    - campus_id NULL means the pathway is church-wide

Design Decisions:
    - steps loaded with selectin and owned (delete-orphan): a PATCH with steps replaces them wholesale
    - progress rows not mapped as a relationship: analytics loads them explicitly
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class Pathway(Base):
    __tablename__ = "pathways"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    church_id: Mapped[str] = mapped_column(
        String(40),
        ForeignKey("churches.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False, index=True,
    )
    campus_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("campuses.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    steps: Mapped[list["PathwayStep"]] = relationship(
        "PathwayStep", back_populates="pathway",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="PathwayStep.order",
    )
