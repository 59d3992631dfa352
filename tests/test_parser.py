"""
AI response parsing tests
"""

import json

import pytest

from planner import MalformedResponse, PlanSource, ShapeViolation, parse_meal_plan
from planner.parser import strip_code_fence

from conftest import WEEK


def _payload(meals):
    return json.dumps({"meals": meals})


class TestCodeFences:
    def test_json_fence(self):
        assert strip_code_fence('```json\n{"meals": []}\n```') == '{"meals": []}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"meals": []}\n```') == '{"meals": []}'

    def test_no_fence(self):
        assert strip_code_fence('  {"meals": []}  ') == '{"meals": []}'


class TestParseMealPlan:
    def test_valid_plan(self, ai_meals):
        plan = parse_meal_plan(_payload(ai_meals))

        assert plan.source == PlanSource.AI
        assert plan.days == WEEK
        assert plan.meals[2].title == "Wednesday Pasta"
        assert plan.meals[2].cooking_time == "25 minutes"

    def test_fenced_plan_matches_unfenced(self, ai_meals):
        fenced = parse_meal_plan(f"```json\n{_payload(ai_meals)}\n```")
        assert fenced == parse_meal_plan(_payload(ai_meals))

    def test_extra_fields_ignored(self, ai_meals):
        meals = [{**meal, "calories": 600} for meal in ai_meals]
        assert len(parse_meal_plan(_payload(meals)).meals) == 7

    def test_days_are_kept_as_returned(self, ai_meals):
        meals = list(reversed(ai_meals))
        plan = parse_meal_plan(_payload(meals))
        assert plan.days == list(reversed(WEEK))

    def test_not_json(self):
        with pytest.raises(MalformedResponse):
            parse_meal_plan("Here are some dinner ideas for your week!")

    def test_empty_text(self):
        with pytest.raises(MalformedResponse):
            parse_meal_plan("")

    @pytest.mark.parametrize("count", [0, 6, 8])
    def test_wrong_meal_count(self, ai_meals, count):
        meals = (ai_meals * 2)[:count]
        with pytest.raises(ShapeViolation, match=f"got {count}"):
            parse_meal_plan(_payload(meals))

    @pytest.mark.parametrize("raw", ['[]', '"meals"', '{"plan": []}', '{"meals": {"day": "Monday"}}'])
    def test_missing_meals_array(self, raw):
        with pytest.raises(ShapeViolation):
            parse_meal_plan(raw)

    @pytest.mark.parametrize("field", ["day", "title", "description", "cookingTime", "cuisine"])
    def test_missing_field(self, ai_meals, field):
        meals = [dict(meal) for meal in ai_meals]
        del meals[3][field]

        with pytest.raises(ShapeViolation, match=f"Meal 4 missing or invalid '{field}'"):
            parse_meal_plan(_payload(meals))

    def test_blank_field(self, ai_meals):
        meals = [dict(meal) for meal in ai_meals]
        meals[0]["title"] = "   "

        with pytest.raises(ShapeViolation):
            parse_meal_plan(_payload(meals))

    def test_non_string_field(self, ai_meals):
        meals = [dict(meal) for meal in ai_meals]
        meals[5]["cookingTime"] = 30

        with pytest.raises(ShapeViolation):
            parse_meal_plan(_payload(meals))

    def test_meal_not_an_object(self, ai_meals):
        meals = list(ai_meals[:6]) + ["Sunday roast"]

        with pytest.raises(ShapeViolation, match="Meal 7 is not an object"):
            parse_meal_plan(_payload(meals))
