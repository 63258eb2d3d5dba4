"""
Daily Diet Backend — Meal SQLAlchemy Model
============================================

What:  ORM model representing the `meals` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; `Database.init()` creates the table.
Who:   Used by MealStore for CRUD operations.

Table Design Rationale:
    - UUID primary key: non-sequential, so ids can't be enumerated
    - owner_id: opaque session identity, the only scoping key for access
    - occurred_at: when the meal was eaten, always stored as UTC
    - created_at: insertion instant; breaks ties between meals with the same
      occurred_at so listing order (and therefore streaks) stays stable

    Index on (owner_id, occurred_at, created_at):
        Serves the two hot queries, "list my meals" and "summarize my meals",
        which both filter by owner and sort chronologically.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dailydiet.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Meal(Base):
    """
    A meal recorded by one owner.

    Lifecycle:
        1. Created by MealStore.create (id and owner_id assigned here)
        2. Mutated only by MealStore.update (partial merge, owner_id never changes)
        3. Removed by MealStore.delete
    """

    __tablename__ = "meals"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier, assigned at creation and never reassigned",
    )

    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Session identity of the owner",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Timezone-aware on PostgreSQL; SQLite stores the UTC wall time without
    # offset, and the response schema re-attaches UTC on the way out.
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the meal was eaten (UTC)",
    )

    is_on_diet: Mapped[bool] = mapped_column(Boolean, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="Insertion instant (UTC), tie-breaker for equal occurred_at",
    )

    __table_args__ = (
        Index("idx_meals_owner_occurred", "owner_id", "occurred_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Meal(id={self.id}, owner_id='{self.owner_id}', "
            f"occurred_at='{self.occurred_at}', is_on_diet={self.is_on_diet})>"
        )
