"""
Domain models for weekly dinner planning
Preferences in, seven dinners out
"""

import re
from typing import FrozenSet, List, Optional, Tuple
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


WEEKDAYS: Tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

PLAN_LENGTH = len(WEEKDAYS)

MIN_FAMILY_SIZE = 1
MAX_FAMILY_SIZE = 8
MAX_DISLIKED_LENGTH = 200
MAX_NOTES_LENGTH = 500


class DietaryRestriction(str, Enum):
    """Supported dietary restrictions"""
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-free"
    DAIRY_FREE = "Dairy-free"
    NUT_ALLERGIES = "Nut allergies"
    KETO = "Keto"
    PALEO = "Paleo"
    NONE = "None"


class CookingTime(str, Enum):
    """Cooking time buckets offered to the user"""
    QUICK = "15 minutes"
    MEDIUM = "30 minutes"
    LONG = "45 minutes"
    HOUR_PLUS = "1+ hour"

    @property
    def minutes(self) -> int:
        return _COOKING_TIME_MINUTES[self]


_COOKING_TIME_MINUTES = {
    CookingTime.QUICK: 15,
    CookingTime.MEDIUM: 30,
    CookingTime.LONG: 45,
    CookingTime.HOUR_PLUS: 60,
}


class CuisineType(str, Enum):
    """Supported cuisine types"""
    ITALIAN = "Italian"
    MEXICAN = "Mexican"
    ASIAN = "Asian"
    AMERICAN = "American"
    MEDITERRANEAN = "Mediterranean"
    INDIAN = "Indian"


class PlanSource(str, Enum):
    """Which path produced a plan"""
    AI = "ai"
    FALLBACK = "fallback"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _unique(items):
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


class UserPreferences(CamelModel):
    """Household preferences for one plan request"""
    model_config = ConfigDict(frozen=True)

    family_size: int = Field(..., ge=MIN_FAMILY_SIZE, le=MAX_FAMILY_SIZE)
    dietary_restrictions: List[DietaryRestriction] = Field(..., min_length=1)
    cooking_time: CookingTime
    cuisine_preferences: List[CuisineType] = Field(..., min_length=1)
    disliked_ingredients: str = Field(default="", max_length=MAX_DISLIKED_LENGTH)
    additional_notes: str = Field(default="", max_length=MAX_NOTES_LENGTH)

    @field_validator("dietary_restrictions", "cuisine_preferences")
    @classmethod
    def dedupe(cls, v):
        return _unique(v)

    @field_validator("disliked_ingredients", "additional_notes", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class Meal(CamelModel):
    """One dinner in a plan"""
    model_config = ConfigDict(frozen=True)

    day: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    cooking_time: str = Field(..., min_length=1)
    cuisine: str = Field(..., min_length=1)


class MealPlan(CamelModel):
    """A week of dinners, Monday first when built offline"""
    model_config = ConfigDict(frozen=True)

    meals: Tuple[Meal, ...]
    source: PlanSource = PlanSource.AI

    @property
    def days(self) -> List[str]:
        return [meal.day for meal in self.meals]


_MINUTES_RE = re.compile(r"\d+")


class RecipeEntry(CamelModel):
    """Catalog recipe used by the offline planner"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    cooking_time: str = Field(..., min_length=1)
    cuisine: CuisineType
    restrictions: FrozenSet[DietaryRestriction] = frozenset()

    @property
    def minutes(self) -> Optional[int]:
        match = _MINUTES_RE.search(self.cooking_time)
        return int(match.group()) if match else None

    def to_meal(self, day: str) -> Meal:
        return Meal(
            day=day,
            title=self.title,
            description=self.description,
            cooking_time=self.cooking_time,
            cuisine=self.cuisine.value,
        )
