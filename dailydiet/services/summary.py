"""
Daily Diet Backend — Diet Summary
===================================

What:  Aggregate diet-adherence statistics over an owner's meal history:
       total meals, on-diet meals, off-diet meals and the best on-diet streak.
Why:   The one piece of domain logic in the service; kept as a pure function
       so it can be tested without a database.
How:   A single forward pass over meals in ascending chronological order.
Who:   `summarize` is called by SummaryService, which reads the meals from
       MealStore; SummaryService is called by GET /api/meals/summary.

Preconditions:
    The input must already be in ascending occurred_at order. The pass never
    sorts; it raises on the first meal that is earlier than its predecessor.
    A non-boolean is_on_diet is rejected the same way. Both are programming
    errors (the store always hands over ordered, typed rows), so they raise
    instead of being reported to the client.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from dailydiet.schemas.meal import MealSummary
from dailydiet.services.meal_store import MealStore, meal_store

logger = logging.getLogger(__name__)


class MealLike(Protocol):
    occurred_at: datetime
    is_on_diet: bool


def summarize(meals: Iterable[MealLike]) -> MealSummary:
    """
    Count meals and find the longest run of consecutive on-diet meals.

    Examples:
        [on, on, off, on]  → total 4, on 3, off 1, best_streak 2
        [off, on, on, on]  → total 4, on 3, off 1, best_streak 3
        []                 → all zeros

    Raises:
        TypeError:  a meal's is_on_diet is not a bool
        ValueError: meals are not in ascending occurred_at order
    """
    on_diet = 0
    off_diet = 0
    best_streak = 0
    current_streak = 0
    previous: Optional[datetime] = None

    for meal in meals:
        if not isinstance(meal.is_on_diet, bool):
            raise TypeError(
                f"is_on_diet must be a bool, got {type(meal.is_on_diet).__name__}"
            )
        if previous is not None and meal.occurred_at < previous:
            raise ValueError("meals must be ordered by occurred_at ascending")
        previous = meal.occurred_at

        if meal.is_on_diet:
            on_diet += 1
            current_streak += 1
        else:
            off_diet += 1
            best_streak = max(best_streak, current_streak)
            current_streak = 0

    # A streak still running at the end of the history counts too
    best_streak = max(best_streak, current_streak)

    return MealSummary(
        total_meals=on_diet + off_diet,
        on_diet_meals=on_diet,
        off_diet_meals=off_diet,
        best_streak=best_streak,
    )


class SummaryService:
    """Reads an owner's meals in chronological order and summarizes them."""

    def __init__(self, store: Optional[MealStore] = None):
        self.store = store or meal_store

    async def summarize_owner(self, db: AsyncSession, owner_id: str) -> MealSummary:
        meals = await self.store.list(db, owner_id, order="asc")
        summary = summarize(meals)
        logger.debug(
            "Summary for owner %s: %d meals, best streak %d",
            owner_id,
            summary.total_meals,
            summary.best_streak,
        )
        return summary


summary_service = SummaryService()
