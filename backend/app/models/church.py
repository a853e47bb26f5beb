"""Church ORM — the organization (tenant) row; every other entity hangs off its id.

Invariants:
    - id is a human-readable string key (PREFIX-YEAR-RANDOM), not a UUID
    - id is rewritten in place by the reassignment routine; children follow in the same transaction
    - subscription_status is one of SubscriptionStatus

Design Decisions:
    - String PK over surrogate UUID: the key is printed on invoices and shown to admins
    - No ORM relationships to children: bulk rewrites go through Core update/delete,
      an identity map full of children would only go stale
"""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class Church(Base):
    __tablename__ = "churches"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    website: Mapped[str | None] = mapped_column(String(300), nullable=True)
    observes_church_membership: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    subscription_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="trial",
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    payment_method: Mapped[str | None] = mapped_column(String(40), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
