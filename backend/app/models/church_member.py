"""ChurchMember ORM — membership of a user in a church, optionally pinned to a campus.

Invariants:
    - (user_id, church_id) is unique
    - church_id follows the church id rewrite (deferred check)
    - deleted with the user or the church
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, ORG_FK_OPTIONS, utcnow


class ChurchMember(Base):
    __tablename__ = "church_members"
    __table_args__ = (
        UniqueConstraint("user_id", "church_id", name="uq_member_user_church"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    church_id: Mapped[str] = mapped_column(
        String(40),
        ForeignKey("churches.id", ondelete="CASCADE", **ORG_FK_OPTIONS),
        nullable=False, index=True,
    )
    campus_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("campuses.id", ondelete="SET NULL"),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="MEMBER")
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
