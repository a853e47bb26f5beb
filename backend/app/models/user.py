"""User ORM — an account; belongs to at most one organization.

Invariants:
    - email is unique and stored lower-case
    - organization_id is nullable; SET NULL when the church row is deleted
    - locked_until in the future means the account refuses logins
    - role is one of UserRole (drives capabilities)

Design Decisions:
    - organization_name denormalized: shown in headers without a JOIN
    - memberships loaded with selectin: async sessions cannot lazy-load on attribute access
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, ORG_FK_OPTIONS, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(254), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="MEMBER")
    organization_id: Mapped[str | None] = mapped_column(
        String(40),
        ForeignKey("churches.id", ondelete="SET NULL", **ORG_FK_OPTIONS),
        nullable=True, index=True,
    )
    organization_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    campus_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("campuses.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    has_multiple_campuses: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    theme_preference: Mapped[str] = mapped_column(
        String(10), nullable=False, default="light",
    )
    ai_chat_visible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    memberships: Mapped[list["ChurchMember"]] = relationship(
        "ChurchMember", lazy="selectin", passive_deletes=True,
        order_by="ChurchMember.joined_at",
    )
