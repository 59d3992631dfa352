"""
Parsing and shape validation for AI meal plan responses
"""

import json
import re
from typing import Any

import structlog

from .errors import MalformedResponse, ShapeViolation
from .models import PLAN_LENGTH, WEEKDAYS, Meal, MealPlan, PlanSource

logger = structlog.get_logger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\s*```$")

# JSON field name -> Meal attribute
REQUIRED_FIELDS = {
    "day": "day",
    "title": "title",
    "description": "description",
    "cookingTime": "cooking_time",
    "cuisine": "cuisine",
}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, tagged ```json or bare"""
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def decode_response(raw_text: str) -> Any:
    """Strip any code fence and decode the completion text as JSON"""
    try:
        return json.loads(strip_code_fence(raw_text or ""))
    except ValueError as e:
        logger.error("Failed to parse AI response as JSON", error=str(e), preview=(raw_text or "")[:200])
        raise MalformedResponse() from e


def validate_meal_plan(data: Any) -> MealPlan:
    """Enforce the 7 x 5 field contract on a decoded response"""
    if not isinstance(data, dict) or not isinstance(data.get("meals"), list):
        raise ShapeViolation("Meal plan must contain a meals array")

    meals = data["meals"]
    if len(meals) != PLAN_LENGTH:
        raise ShapeViolation(f"Expected {PLAN_LENGTH} meals, got {len(meals)}")

    parsed = []
    for index, meal in enumerate(meals, start=1):
        if not isinstance(meal, dict):
            raise ShapeViolation(f"Meal {index} is not an object")
        for field in REQUIRED_FIELDS:
            if not _is_filled(meal.get(field)):
                raise ShapeViolation(f"Meal {index} missing or invalid '{field}' field")
        parsed.append(Meal(**{attr: meal[field] for field, attr in REQUIRED_FIELDS.items()}))

    plan = MealPlan(meals=tuple(parsed), source=PlanSource.AI)

    if plan.days != list(WEEKDAYS):
        logger.info("AI meal plan days differ from Monday to Sunday", days=plan.days)

    logger.info("Meal plan validation passed", meals=len(parsed))
    return plan


def parse_meal_plan(raw_text: str) -> MealPlan:
    """Decode completion text into a MealPlan"""
    return validate_meal_plan(decode_response(raw_text))
