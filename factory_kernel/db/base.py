"""
Module: factory_kernel.db.base
Responsibility: Declarative base for the ORM tables that back the blob store.
Architecture position: Kernel > DB.  Lowest-level import target for ORM
    models; MUST NOT import from domain/, engines, services or config.

Invariants enforced:
    - Timestamps are timezone-aware (DateTime(timezone=True)).
    - Every table records created_at/updated_at.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TimestampedBase(Base):
    """Abstract base adding created/updated timestamps."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
