"""
Daily Diet Backend — Validation Unit Tests
============================================

What:  Tests for payload validation, date normalization and the
       partial-update merge rule.
How:   Plain dicts in, Valid / Invalid out. No HTTP, no database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dailydiet.schemas.meal import MealFields, MealUpdate, parse_occurred_at
from dailydiet.services.validation import (
    Invalid,
    Valid,
    merge_update,
    validate_meal_update,
    validate_new_meal,
)

CHRISTMAS = datetime(2023, 12, 25, tzinfo=timezone.utc)


class TestParseOccurredAt:
    """Every accepted spelling lands on an aware UTC datetime."""

    def test_day_month_year_equals_iso_utc(self):
        assert parse_occurred_at("25/12/2023") == parse_occurred_at("2023-12-25T00:00:00Z")

    def test_day_month_year_is_utc_midnight(self):
        assert parse_occurred_at("25/12/2023") == CHRISTMAS
        assert parse_occurred_at("25/12/2023").tzinfo == timezone.utc

    def test_iso_date_only(self):
        assert parse_occurred_at("2023-12-25") == CHRISTMAS

    def test_offset_is_converted_to_utc(self):
        result = parse_occurred_at("2023-12-24T21:00:00-03:00")
        assert result == CHRISTMAS
        assert result.utcoffset().total_seconds() == 0

    def test_naive_iso_is_taken_as_utc(self):
        assert parse_occurred_at("2023-12-25T00:00:00") == CHRISTMAS

    def test_epoch_milliseconds(self):
        assert parse_occurred_at(1703462400000) == CHRISTMAS

    def test_datetime_passthrough(self):
        assert parse_occurred_at(datetime(2023, 12, 25)) == CHRISTMAS

    @pytest.mark.parametrize("value", [
        "31/02/2024",
        "yesterday",
        "2023-13-01",
        "",
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:00:00-05:00",
    ])
    def test_rejects_unparseable_strings(self, value):
        with pytest.raises(ValueError):
            parse_occurred_at(value)

    def test_aware_datetime_outside_utc_range(self):
        earliest = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=1)))
        with pytest.raises(ValueError, match="out of range"):
            parse_occurred_at(earliest)

    @pytest.mark.parametrize("value", [True, None, [2023, 12, 25]])
    def test_rejects_other_types(self, value):
        with pytest.raises(ValueError):
            parse_occurred_at(value)


class TestValidateNewMeal:

    def test_valid_camel_case_payload(self):
        result = validate_new_meal({
            "name": "Lunch",
            "description": "Grilled chicken",
            "date": "25/12/2023",
            "isOnDiet": True,
        })
        assert isinstance(result, Valid)
        assert result.fields.name == "Lunch"
        assert result.fields.occurred_at == CHRISTMAS
        assert result.fields.is_on_diet is True

    def test_valid_snake_case_payload(self):
        result = validate_new_meal({
            "name": "Lunch",
            "description": "Grilled chicken",
            "occurred_at": "2023-12-25T00:00:00Z",
            "is_on_diet": False,
        })
        assert isinstance(result, Valid)
        assert result.fields.is_on_diet is False

    def test_missing_field_is_reported(self):
        result = validate_new_meal({
            "description": "No name",
            "date": "25/12/2023",
            "isOnDiet": True,
        })
        assert isinstance(result, Invalid)
        assert any(reason.startswith("name:") for reason in result.reasons)

    def test_every_problem_is_reported(self):
        result = validate_new_meal({})
        assert isinstance(result, Invalid)
        assert len(result.reasons) == 4

    def test_string_boolean_is_rejected(self):
        result = validate_new_meal({
            "name": "Lunch",
            "description": "Salad",
            "date": "25/12/2023",
            "isOnDiet": "true",
        })
        assert isinstance(result, Invalid)

    def test_blank_name_is_rejected(self):
        result = validate_new_meal({
            "name": "   ",
            "description": "Salad",
            "date": "25/12/2023",
            "isOnDiet": True,
        })
        assert isinstance(result, Invalid)

    def test_bad_date_reason_mentions_format(self):
        result = validate_new_meal({
            "name": "Lunch",
            "description": "Salad",
            "date": "tomorrow",
            "isOnDiet": True,
        })
        assert isinstance(result, Invalid)
        assert any("DD/MM/YYYY" in reason for reason in result.reasons)

    def test_date_that_overflows_in_utc_is_reported(self):
        result = validate_new_meal({
            "name": "Lunch",
            "description": "Salad",
            "date": "0001-01-01T00:00:00+01:00",
            "isOnDiet": True,
        })
        assert isinstance(result, Invalid)
        assert any("out of range" in reason for reason in result.reasons)

    def test_non_object_body(self):
        result = validate_new_meal(["Lunch"])
        assert result == Invalid(["body: Expected a JSON object"])


class TestValidateMealUpdate:

    def test_empty_update_is_valid(self):
        result = validate_meal_update({})
        assert isinstance(result, Valid)
        assert result.fields.provided() == {}

    def test_only_provided_fields_are_kept(self):
        result = validate_meal_update({"isOnDiet": False})
        assert isinstance(result, Valid)
        assert result.fields.provided() == {"is_on_diet": False}

    def test_explicit_null_is_rejected(self):
        result = validate_meal_update({"name": None})
        assert isinstance(result, Invalid)
        assert any("null" in reason for reason in result.reasons)

    def test_date_is_normalized(self):
        result = validate_meal_update({"occurredAt": "25/12/2023"})
        assert result.fields.occurred_at == CHRISTMAS


class TestMergeUpdate:
    """Absent field ⇒ keep the current value."""

    def setup_method(self):
        self.current = MealFields(
            name="Dinner",
            description="Pizza",
            occurred_at=CHRISTMAS,
            is_on_diet=False,
        )

    def test_only_flag_changes(self):
        merged = merge_update(self.current, MealUpdate(is_on_diet=True))
        assert merged.is_on_diet is True
        assert merged.name == "Dinner"
        assert merged.description == "Pizza"
        assert merged.occurred_at == CHRISTMAS

    def test_empty_update_changes_nothing(self):
        assert merge_update(self.current, MealUpdate()) == self.current

    def test_current_is_not_modified(self):
        merge_update(self.current, MealUpdate(name="Supper"))
        assert self.current.name == "Dinner"

    def test_all_fields_replaced(self):
        new_time = datetime(2024, 1, 1, 20, tzinfo=timezone.utc)
        merged = merge_update(
            self.current,
            MealUpdate(name="Soup", description="Vegetable soup", occurred_at=new_time, is_on_diet=True),
        )
        assert merged == MealFields(
            name="Soup", description="Vegetable soup", occurred_at=new_time, is_on_diet=True
        )
