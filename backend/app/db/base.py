"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - ORG_FK_OPTIONS shared by every FK into churches.id: the identifier rewrite
      repoints parent and children inside one transaction, so the check waits for COMMIT
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase

ORG_FK_OPTIONS = {"deferrable": True, "initially": "DEFERRED"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all Gatherwise ORM models."""
    pass
