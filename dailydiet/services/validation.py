"""
Daily Diet Backend — Meal Input Validation
============================================

What:  Pure validation functions for meal payloads and the partial-update
       merge rule.
Why:   Keeps validation independent of FastAPI so it can be unit-tested on
       plain dicts, and makes "absent field keeps its value" an explicit
       function rather than a side effect of ORM attribute assignment.
How:   Pydantic parses the payload into a typed struct; failures are
       collected into a tagged `Invalid(reasons)` result instead of raised.
Who:   Called by the meal routes before any store access.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from dailydiet.schemas.meal import MealFields, MealUpdate

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class Valid(Generic[T]):
    fields: T


@dataclass(frozen=True)
class Invalid:
    reasons: List[str] = field(default_factory=list)


ValidationResult = Union[Valid[T], Invalid]


def format_reasons(errors: Iterable[Dict[str, Any]]) -> List[str]:
    """Turn pydantic error dicts into "field: message" strings."""
    reasons = []
    for error in errors:
        location = ".".join(str(part) for part in error["loc"]) or "body"
        message = error["msg"]
        # pydantic prefixes messages from plain ValueErrors
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        reasons.append(f"{location}: {message}")
    return reasons


def _validate(model: type, payload: Any) -> "ValidationResult":
    if not isinstance(payload, dict):
        return Invalid(["body: Expected a JSON object"])
    try:
        return Valid(model.model_validate(payload))
    except PydanticValidationError as exc:
        return Invalid(format_reasons(exc.errors()))


def validate_new_meal(payload: Any) -> "ValidationResult[MealFields]":
    """
    Validate a create payload; every attribute is required.

    Example:
        validate_new_meal({"name": "Lunch", "description": "Salad",
                           "date": "25/12/2023", "isOnDiet": True})
        → Valid(fields=MealFields(name="Lunch", ..., is_on_diet=True))

        validate_new_meal({"name": "Lunch"})
        → Invalid(reasons=["description: Field required", ...])
    """
    return _validate(MealFields, payload)


def validate_meal_update(payload: Any) -> "ValidationResult[MealUpdate]":
    """Validate an update payload; every attribute is optional but non-null."""
    return _validate(MealUpdate, payload)


def merge_update(current: MealFields, changes: MealUpdate) -> MealFields:
    """
    Apply a partial update: provided attributes win, absent ones are kept.

    Returns a new MealFields; `current` is not modified.
    """
    return current.model_copy(update=changes.provided())
