"""
Daily Diet Backend — Pydantic Input Structs and Response Schemas
=================================================================

What:  Pydantic models defining the API contract for meals.
Why:   Typed input structs for validation and typed responses for
       serialization and OpenAPI docs.
How:   Input structs (MealFields, MealUpdate) are validated by the pure
       functions in services/validation.py; response models are built
       from ORM objects with `from_attributes`.

Date handling:
    Clients send `occurred_at` as an ISO date or date-time, as a `DD/MM/YYYY`
    literal, or as epoch milliseconds. Everything is normalized to an aware
    UTC datetime before it reaches the store, so "25/12/2023" and
    "2023-12-25T00:00:00Z" are the same instant.
"""

import re
import uuid
from datetime import date, datetime, timezone
from typing import Annotated, Any, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
)

_DAY_MONTH_YEAR = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_occurred_at(value: Any) -> datetime:
    """
    Normalize a client-supplied meal time to an aware UTC datetime.

    Accepted inputs:
        "25/12/2023"                → 2023-12-25T00:00:00Z
        "2023-12-25"                → 2023-12-25T00:00:00Z
        "2023-12-25T13:45:00-03:00" → 2023-12-25T16:45:00Z
        1703462400000 (epoch ms)    → 2023-12-25T00:00:00Z
        datetime / date objects     → converted to UTC

    Raises:
        ValueError: value is of an unsupported type, not a real date, or
            outside the representable range once converted to UTC.
    """
    if isinstance(value, datetime):
        try:
            return _as_utc(value)
        except OverflowError:
            raise ValueError(f"{value.isoformat()} is out of range in UTC")
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError("Expected a date, got a boolean")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Timestamp {value!r} is out of range")
    if not isinstance(value, str):
        raise ValueError(f"Expected a date string, got {type(value).__name__}")

    text = value.strip()
    match = _DAY_MONTH_YEAR.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, tzinfo=timezone.utc)
        except ValueError:
            raise ValueError(f"'{value}' is not a valid calendar date")

    # fromisoformat only understands a trailing "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(
            f"Unrecognized date '{value}'. Use ISO 8601 or DD/MM/YYYY"
        )
    # Offsets near year 1 or 9999 can push the instant outside datetime's range
    try:
        return _as_utc(parsed)
    except OverflowError:
        raise ValueError(f"'{value}' is out of range in UTC")


OccurredAt = Annotated[datetime, BeforeValidator(parse_occurred_at)]

_OCCURRED_AT_ALIASES = AliasChoices("occurred_at", "occurredAt", "date")
_IS_ON_DIET_ALIASES = AliasChoices("is_on_diet", "isOnDiet")


# ══════════════════════════════════════════════════════════════════════════
# Input Structs — validated by services/validation.py
# ══════════════════════════════════════════════════════════════════════════


class MealFields(BaseModel):
    """
    The four user-editable attributes of a meal, all required.

    Used for create payloads and as the "current state" side of an
    update merge.
    """
    name: StrictStr = Field(min_length=1, max_length=255, description="Short name of the meal")
    description: StrictStr = Field(description="What was eaten")
    occurred_at: OccurredAt = Field(validation_alias=_OCCURRED_AT_ALIASES)
    is_on_diet: StrictBool = Field(validation_alias=_IS_ON_DIET_ALIASES)

    model_config = {
        "str_strip_whitespace": True,
        "frozen": True,
        "from_attributes": True,
    }


class MealUpdate(BaseModel):
    """
    Partial update: every attribute optional, absent means "keep".

    An explicit null is rejected rather than read as "clear this field";
    none of the meal attributes can be empty.
    """
    name: Optional[StrictStr] = Field(default=None, min_length=1, max_length=255)
    description: Optional[StrictStr] = None
    occurred_at: Optional[OccurredAt] = Field(default=None, validation_alias=_OCCURRED_AT_ALIASES)
    is_on_diet: Optional[StrictBool] = Field(default=None, validation_alias=_IS_ON_DIET_ALIASES)

    model_config = {
        "str_strip_whitespace": True,
        "frozen": True,
    }

    @field_validator("name", "description", "occurred_at", "is_on_diet", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    def provided(self) -> dict:
        """Only the attributes the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class MealResponse(BaseModel):
    """Full representation of one meal."""
    id: uuid.UUID = Field(description="Unique meal identifier (UUID)")
    name: str
    description: str
    occurred_at: datetime = Field(description="When the meal was eaten (UTC ISO 8601)")
    is_on_diet: bool
    created_at: datetime = Field(description="When the meal was recorded (UTC ISO 8601)")

    model_config = {"from_attributes": True}

    @field_validator("occurred_at", "created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return _as_utc(v)


class MealDetailResponse(BaseModel):
    """Returned by GET /api/meals/{id}."""
    meal: MealResponse


class MealListResponse(BaseModel):
    """Returned by GET /api/meals."""
    meals: List[MealResponse]


class MealCreatedResponse(BaseModel):
    """Returned by POST /api/meals with HTTP 201."""
    id: uuid.UUID = Field(description="Identifier assigned to the new meal")


class MealSummary(BaseModel):
    """
    Diet-adherence statistics over an owner's whole history.

    total_meals == on_diet_meals + off_diet_meals always holds.
    best_streak is the longest run of consecutive on-diet meals.
    """
    total_meals: int = Field(default=0, ge=0)
    on_diet_meals: int = Field(default=0, ge=0)
    off_diet_meals: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Meal not found.",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected, not_initialized")
    uptime_seconds: float = Field(description="Seconds since service started")
