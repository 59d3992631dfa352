"""
Weekly Meal Planner core
Preference validation, AI generation with retry, and the offline catalog fallback
"""

from typing import Optional

from .catalog import RecipeCatalog
from .completion import CompletionClient, CompletionConfig
from .errors import (
    CompletionError,
    FailureType,
    InvalidCredential,
    InvalidPreferences,
    MalformedResponse,
    MealPlanError,
    NoMatchingRecipes,
    NotConfigured,
    QuotaExceeded,
    RateLimited,
    ShapeViolation,
    TransientUnavailable,
)
from .fallback import FallbackPlanner
from .models import Meal, MealPlan, PlanSource, UserPreferences
from .parser import parse_meal_plan
from .prompts import build_user_prompt
from .service import GenerationOutcome, MealPlanner
from .slack import DeliveryResult, SlackNotifier


def build_meal_planner(settings, catalog: Optional[RecipeCatalog] = None) -> MealPlanner:
    """Wire the planner from application settings"""
    catalog = catalog or RecipeCatalog.load()
    return MealPlanner(
        completion_client=CompletionClient(CompletionConfig.from_settings(settings)),
        fallback_planner=FallbackPlanner(catalog),
    )


def build_slack_notifier(settings) -> SlackNotifier:
    return SlackNotifier(settings.slack_webhook_url, timeout=settings.slack_timeout)


__all__ = [
    "CompletionClient",
    "CompletionConfig",
    "CompletionError",
    "DeliveryResult",
    "FailureType",
    "FallbackPlanner",
    "GenerationOutcome",
    "InvalidCredential",
    "InvalidPreferences",
    "MalformedResponse",
    "Meal",
    "MealPlan",
    "MealPlanError",
    "MealPlanner",
    "NoMatchingRecipes",
    "NotConfigured",
    "PlanSource",
    "QuotaExceeded",
    "RateLimited",
    "RecipeCatalog",
    "ShapeViolation",
    "SlackNotifier",
    "TransientUnavailable",
    "UserPreferences",
    "build_meal_planner",
    "build_slack_notifier",
    "build_user_prompt",
    "parse_meal_plan",
]
