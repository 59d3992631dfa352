"""
Offline meal planning from the static recipe catalog
Used when the completion provider is unconfigured or fails
"""

import random
from itertools import cycle, islice
from typing import List, Optional

import structlog

from .catalog import RecipeCatalog
from .errors import NoMatchingRecipes
from .models import (
    PLAN_LENGTH,
    WEEKDAYS,
    DietaryRestriction,
    MealPlan,
    PlanSource,
    RecipeEntry,
    UserPreferences,
)

logger = structlog.get_logger(__name__)

# Minutes a recipe may run over the requested cooking time
COOKING_TIME_BUFFER = 15


class FallbackPlanner:
    """Builds a week of dinners from catalog recipes matching the preferences"""

    def __init__(self, catalog: RecipeCatalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or random.Random()

    def generate(self, preferences: UserPreferences) -> MealPlan:
        candidates = self.filter_recipes(preferences)
        if not candidates:
            logger.warning(
                "No catalog recipes match preferences",
                restrictions=[r.value for r in preferences.dietary_restrictions],
                cooking_time=preferences.cooking_time.value,
                cuisines=[c.value for c in preferences.cuisine_preferences],
            )
            raise NoMatchingRecipes()

        selected = self._select(candidates)
        plan = MealPlan(
            meals=tuple(recipe.to_meal(day) for day, recipe in zip(WEEKDAYS, selected)),
            source=PlanSource.FALLBACK,
        )

        logger.info(
            "Fallback meal plan generated",
            candidates=len(candidates),
            repeated=len(candidates) < PLAN_LENGTH,
        )
        return plan

    def filter_recipes(self, preferences: UserPreferences) -> List[RecipeEntry]:
        return [recipe for recipe in self.catalog if self._matches(recipe, preferences)]

    def _matches(self, recipe: RecipeEntry, preferences: UserPreferences) -> bool:
        restrictions = set(preferences.dietary_restrictions)
        meets_restrictions = (
            DietaryRestriction.NONE in restrictions
            or bool(recipe.restrictions & restrictions)
        )

        minutes = recipe.minutes
        meets_time = minutes is not None and minutes <= preferences.cooking_time.minutes + COOKING_TIME_BUFFER

        meets_cuisine = recipe.cuisine in preferences.cuisine_preferences

        return meets_restrictions and meets_time and meets_cuisine

    def _select(self, candidates: List[RecipeEntry]) -> List[RecipeEntry]:
        shuffled = list(candidates)
        self.rng.shuffle(shuffled)
        # Short lists repeat from the top until the week is full
        return list(islice(cycle(shuffled), PLAN_LENGTH))
