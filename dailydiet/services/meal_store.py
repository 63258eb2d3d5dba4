"""
Daily Diet Backend — Meal Store
=================================

What:  Owner-scoped CRUD over the `meals` table.
Why:   Every access rule ("only the owner sees, changes or deletes a meal")
       lives in one place instead of being repeated in each route.
How:   Every query filters on both the meal id and the caller's owner_id, so
       another owner's meal is indistinguishable from a missing one.
Who:   Called by the meal routes and by SummaryService.

Design Decision:
    MealStore is stateless; it receives the request's AsyncSession on every
    call. Committing is the session owner's job (Database.session), so the
    store only flushes. SQLAlchemy failures are wrapped in DatabaseError;
    NotFoundError and ValidationError propagate unchanged.
"""

import logging
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dailydiet.exceptions import DatabaseError, NotFoundError, ValidationError
from dailydiet.models.meal import Meal
from dailydiet.schemas.meal import MealFields, MealUpdate
from dailydiet.services.validation import merge_update

logger = logging.getLogger(__name__)

SORT_ORDERS = ("asc", "desc")


class MealStore:
    """
    Durable keyed storage of meal records, scoped per owner.

    Responsibilities:
        - create(): assign an id and persist a new meal
        - get(): fetch one meal if (and only if) the caller owns it
        - list(): all of the caller's meals in chronological order
        - update(): partial merge over an owned meal
        - delete(): remove an owned meal
    """

    async def create(
        self,
        db: AsyncSession,
        owner_id: str,
        name: str,
        description: str,
        occurred_at: datetime,
        is_on_diet: bool,
    ) -> UUID:
        """
        Persist a new meal and return its id.

        The id is assigned here rather than by the database so it is known
        before the flush and identical across backends.
        """
        meal = Meal(
            owner_id=owner_id,
            name=name,
            description=description,
            occurred_at=occurred_at,
            is_on_diet=is_on_diet,
        )
        try:
            db.add(meal)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating meal for owner %s: %s", owner_id, str(e))
            raise DatabaseError(
                message="Could not save the meal. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Meal %s created for owner %s", meal.id, owner_id)
        return meal.id

    async def create_from_fields(self, db: AsyncSession, owner_id: str, fields: MealFields) -> UUID:
        return await self.create(
            db,
            owner_id=owner_id,
            name=fields.name,
            description=fields.description,
            occurred_at=fields.occurred_at,
            is_on_diet=fields.is_on_diet,
        )

    async def get(self, db: AsyncSession, owner_id: str, meal_id: UUID) -> Meal:
        """
        Fetch one meal owned by `owner_id`.

        Query plan:
            SELECT * FROM meals WHERE id = :id AND owner_id = :owner

        Raises:
            NotFoundError: no such meal, or it belongs to somebody else
            DatabaseError: query execution failed
        """
        try:
            result = await db.execute(
                select(Meal).where(Meal.id == meal_id, Meal.owner_id == owner_id)
            )
            meal = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching meal %s: %s", meal_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the meal. Please try again.",
                context={"meal_id": str(meal_id)},
            )

        if meal is None:
            raise NotFoundError(resource="meal", resource_id=str(meal_id))
        return meal

    async def list(self, db: AsyncSession, owner_id: str, order: str = "desc") -> List[Meal]:
        """
        All meals of `owner_id`, sorted by occurred_at.

        Meals with the same occurred_at keep insertion order (created_at),
        reversed along with everything else for "desc". Summaries rely on
        "asc" being strictly chronological.
        """
        if order not in SORT_ORDERS:
            raise ValidationError(
                message=f"Invalid order '{order}'",
                reasons=[f"order: must be one of {', '.join(SORT_ORDERS)}"],
            )
        direction = asc if order == "asc" else desc
        query = (
            select(Meal)
            .where(Meal.owner_id == owner_id)
            .order_by(direction(Meal.occurred_at), direction(Meal.created_at))
        )
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing meals: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve meals. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update(
        self,
        db: AsyncSession,
        owner_id: str,
        meal_id: UUID,
        changes: MealUpdate,
    ) -> Meal:
        """
        Merge the provided attributes over an owned meal.

        Ownership is checked first with get() semantics, so updating another
        owner's meal raises NotFoundError and writes nothing.
        """
        meal = await self.get(db, owner_id, meal_id)
        merged = merge_update(MealFields.model_validate(meal), changes)

        meal.name = merged.name
        meal.description = merged.description
        meal.occurred_at = merged.occurred_at
        meal.is_on_diet = merged.is_on_diet
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating meal %s: %s", meal_id, str(e))
            raise DatabaseError(
                message="Could not update the meal. Please try again.",
                context={"meal_id": str(meal_id)},
            )
        logger.info(
            "Meal %s updated for owner %s (fields: %s)",
            meal_id,
            owner_id,
            ", ".join(sorted(changes.provided())) or "none",
        )
        return meal

    async def delete(self, db: AsyncSession, owner_id: str, meal_id: UUID) -> None:
        """
        Remove an owned meal.

        Raises:
            NotFoundError: unknown id or not owned; nothing is deleted
        """
        meal = await self.get(db, owner_id, meal_id)
        try:
            await db.delete(meal)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting meal %s: %s", meal_id, str(e))
            raise DatabaseError(
                message="Could not delete the meal. Please try again.",
                context={"meal_id": str(meal_id)},
            )
        logger.info("Meal %s deleted for owner %s", meal_id, owner_id)


meal_store = MealStore()
