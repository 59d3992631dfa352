"""
Meal plan orchestration
Validates preferences, tries the AI path and falls back to the catalog
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from .completion import CompletionClient
from .errors import FailureType, InvalidPreferences, MealPlanError
from .fallback import FallbackPlanner
from .models import MealPlan, UserPreferences
from .parser import decode_response, validate_meal_plan
from .prompts import build_user_prompt

logger = structlog.get_logger(__name__)

FIELD_MESSAGES = {
    "family_size": "Family size must be between 1 and 8",
    "dietary_restrictions": "At least one valid dietary restriction must be specified",
    "cooking_time": "A valid cooking time preference is required",
    "cuisine_preferences": "At least one valid cuisine preference must be specified",
    "disliked_ingredients": "Disliked ingredients must be 200 characters or less",
    "additional_notes": "Additional notes must be 500 characters or less",
}


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of the AI path: a plan, or the error that stopped it"""
    plan: Optional[MealPlan] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.plan is not None

    @property
    def failure_type(self) -> FailureType:
        if isinstance(self.error, MealPlanError):
            return self.error.failure_type
        return FailureType.UNEXPECTED


def validate_preferences(preferences: Union[UserPreferences, Mapping[str, Any], None]) -> UserPreferences:
    """Check preferences before any downstream call"""
    if preferences is None:
        raise InvalidPreferences("User preferences are required")

    if isinstance(preferences, UserPreferences):
        data = preferences.model_dump()
    elif isinstance(preferences, Mapping):
        data = dict(preferences)
    else:
        raise InvalidPreferences("User preferences must be an object")

    try:
        return UserPreferences.model_validate(data)
    except ValidationError as e:
        messages = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            message = FIELD_MESSAGES.get(_snake(field), error["msg"])
            if message not in messages:
                messages.append(message)
        raise InvalidPreferences(messages[0], details=messages) from e


def _snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


class MealPlanner:
    """Entry point for weekly dinner plan generation"""

    def __init__(self, completion_client: CompletionClient, fallback_planner: FallbackPlanner):
        self.completion_client = completion_client
        self.fallback_planner = fallback_planner

    @property
    def ai_enabled(self) -> bool:
        return self.completion_client.is_configured

    async def generate(self, preferences: Union[UserPreferences, Mapping[str, Any]]) -> MealPlan:
        """
        Produce a seven-day plan.

        Only invalid preferences, or a catalog with nothing matching them,
        raise; every failure on the AI path ends in the catalog fallback.
        """
        preferences = validate_preferences(preferences)

        logger.info(
            "Generating meal plan",
            family_size=preferences.family_size,
            restrictions=len(preferences.dietary_restrictions),
            cuisines=len(preferences.cuisine_preferences),
            ai_enabled=self.ai_enabled,
        )

        if not self.ai_enabled:
            logger.info("AI service not configured, using fallback meal plan")
            return self.fallback_planner.generate(preferences)

        outcome = await self.generate_with_ai(preferences)
        if outcome.ok:
            logger.info("AI meal plan generated", meals=len(outcome.plan.meals))
            return outcome.plan

        logger.warning(
            "AI meal plan failed, falling back to catalog",
            failure_type=outcome.failure_type.value,
            error=str(outcome.error),
        )
        return self.fallback_planner.generate(preferences)

    async def generate_with_ai(self, preferences: UserPreferences) -> GenerationOutcome:
        """Prompt, complete and parse; errors are returned, not raised"""
        prompt = build_user_prompt(preferences)
        try:
            data = await self.completion_client.complete(prompt, decode=decode_response)
            return GenerationOutcome(plan=validate_meal_plan(data))
        except MealPlanError as e:
            return GenerationOutcome(error=e)
        except Exception as e:
            logger.error("Unexpected error on AI meal plan path", error=str(e), exc_info=True)
            return GenerationOutcome(error=e)

    async def close(self) -> None:
        await self.completion_client.close()
