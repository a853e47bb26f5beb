"""CustomRole ORM — a named per-church role with resource-level permissions.

Invariants:
    - (name, church_id) is unique
    - is_system_role rows are upserted by name, never duplicated
    - permissions are owned: replaced wholesale, deleted with the role
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class CustomRole(Base):
    __tablename__ = "custom_roles"
    __table_args__ = (
        UniqueConstraint("name", "church_id", name="uq_role_name_church"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    church_id: Mapped[str] = mapped_column(
        String(40),
        ForeignKey("churches.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system_role: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission", back_populates="role",
        cascade="all, delete-orphan", lazy="selectin",
    )
