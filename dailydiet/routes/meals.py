"""
Daily Diet Backend — Meal Route Handlers
==========================================

What:  HTTP surface for recording, reading, changing and summarizing meals.
How:   Each handler resolves the caller with `get_current_owner`, validates
       the body with the pure validators, delegates to MealStore or
       SummaryService and picks the status code.

Status conventions:
    201 Created     POST   (body: {"id": ...}, Location header)
    204 No Content  PUT / PATCH / DELETE
    200 OK          reads
    400             payload failed validation (nothing written)
    401             no session cookie
    404             meal missing or owned by somebody else
"""

import logging
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from dailydiet.auth import get_current_owner
from dailydiet.database import get_db_session
from dailydiet.exceptions import ValidationError
from dailydiet.schemas.meal import (
    ErrorResponse,
    MealCreatedResponse,
    MealDetailResponse,
    MealListResponse,
    MealResponse,
    MealSummary,
)
from dailydiet.services.meal_store import meal_store
from dailydiet.services.summary import summary_service
from dailydiet.services.validation import Invalid, validate_meal_update, validate_new_meal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Meals"])

_AUTH_ERRORS = {401: {"description": "Missing session cookie", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Meal not found", "model": ErrorResponse}}
_INVALID = {400: {"description": "Invalid meal data", "model": ErrorResponse}}

MEAL_EXAMPLE = {
    "name": "Breakfast",
    "description": "Oatmeal with banana",
    "occurred_at": "25/12/2023",
    "is_on_diet": True,
}


def _raise_if_invalid(result) -> None:
    if isinstance(result, Invalid):
        raise ValidationError(message="Invalid meal data", reasons=result.reasons)


@router.post(
    "/meals",
    status_code=201,
    response_model=MealCreatedResponse,
    responses={**_INVALID, **_AUTH_ERRORS},
    summary="Record a meal",
)
async def create_meal(
    response: Response,
    payload: Any = Body(..., examples=[MEAL_EXAMPLE]),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> MealCreatedResponse:
    """
    Record a meal for the caller.

    `occurred_at` (also accepted as `occurredAt` or `date`) may be an ISO
    date/date-time, a `DD/MM/YYYY` literal or epoch milliseconds.
    """
    result = validate_new_meal(payload)
    _raise_if_invalid(result)

    meal_id = await meal_store.create_from_fields(db, owner_id, result.fields)
    response.headers["Location"] = f"/api/meals/{meal_id}"
    return MealCreatedResponse(id=meal_id)


@router.get(
    "/meals",
    response_model=MealListResponse,
    responses=_AUTH_ERRORS,
    summary="List my meals",
)
async def list_meals(
    response: Response,
    order: Literal["asc", "desc"] = Query(
        default="desc",
        description="Chronological order: 'desc' (latest first) or 'asc' (oldest first)",
    ),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> MealListResponse:
    """All meals recorded by the caller, with the count in X-Total-Count."""
    meals = await meal_store.list(db, owner_id, order=order)
    response.headers["X-Total-Count"] = str(len(meals))
    return MealListResponse(meals=[MealResponse.model_validate(meal) for meal in meals])


@router.get(
    "/meals/summary",
    response_model=MealSummary,
    responses=_AUTH_ERRORS,
    summary="Diet statistics for my meals",
)
async def get_summary(
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> MealSummary:
    """
    Totals and best streak over the caller's whole history.

    The best streak is the longest run of consecutive on-diet meals in
    chronological order, including a run that is still going.
    """
    return await summary_service.summarize_owner(db, owner_id)


@router.get(
    "/meals/{meal_id}",
    response_model=MealDetailResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Get one of my meals",
)
async def get_meal(
    meal_id: UUID,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> MealDetailResponse:
    meal = await meal_store.get(db, owner_id, meal_id)
    return MealDetailResponse(meal=MealResponse.model_validate(meal))


@router.api_route(
    "/meals/{meal_id}",
    methods=["PUT", "PATCH"],
    status_code=204,
    response_class=Response,
    responses={**_INVALID, **_AUTH_ERRORS, **_NOT_FOUND},
    summary="Change some fields of one of my meals",
)
async def update_meal(
    meal_id: UUID,
    payload: Any = Body(..., examples=[{"is_on_diet": False}]),
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Fields left out of the body keep their current values."""
    result = validate_meal_update(payload)
    _raise_if_invalid(result)

    await meal_store.update(db, owner_id, meal_id, result.fields)
    return Response(status_code=204)


@router.delete(
    "/meals/{meal_id}",
    status_code=204,
    response_class=Response,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Delete one of my meals",
)
async def delete_meal(
    meal_id: UUID,
    owner_id: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await meal_store.delete(db, owner_id, meal_id)
    return Response(status_code=204)
