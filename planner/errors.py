"""
Error taxonomy for meal plan generation
"""

from enum import Enum
from typing import List, Optional


class FailureType(Enum):
    """Kinds of failure the pipeline distinguishes"""
    INVALID_PREFERENCES = "invalid_preferences"
    NOT_CONFIGURED = "not_configured"
    AUTHENTICATION_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    SHAPE_VIOLATION = "shape_violation"
    NO_MATCHING_RECIPES = "no_matching_recipes"
    UNEXPECTED = "unexpected"


class MealPlanError(Exception):
    """Base class for every error raised by the planner"""

    failure_type = FailureType.UNEXPECTED
    status_code = 500
    default_message = "An unexpected error occurred. Please try again later."

    def __init__(self, message: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class InvalidPreferences(MealPlanError):
    failure_type = FailureType.INVALID_PREFERENCES
    status_code = 400
    default_message = "Invalid meal preferences"


# Completion provider failures

class CompletionError(MealPlanError):
    failure_type = FailureType.SERVICE_UNAVAILABLE
    status_code = 503
    default_message = "The AI service is temporarily unavailable. Please try again."


class NotConfigured(CompletionError):
    failure_type = FailureType.NOT_CONFIGURED
    default_message = "The AI service is not configured."


class InvalidCredential(CompletionError):
    failure_type = FailureType.AUTHENTICATION_ERROR
    default_message = "Invalid AI provider API key. Please check your configuration."


class RateLimited(CompletionError):
    failure_type = FailureType.RATE_LIMITED
    default_message = "API rate limit exceeded. Please try again in a moment."


class QuotaExceeded(CompletionError):
    failure_type = FailureType.QUOTA_EXCEEDED
    default_message = "AI provider quota exceeded. Please check your account."


class TransientUnavailable(CompletionError):
    failure_type = FailureType.SERVICE_UNAVAILABLE


# Unusable completion content

class ResponseError(MealPlanError):
    status_code = 503
    default_message = "Invalid meal plan format received from AI."


class MalformedResponse(ResponseError):
    failure_type = FailureType.MALFORMED_RESPONSE


class ShapeViolation(ResponseError):
    failure_type = FailureType.SHAPE_VIOLATION


class NoMatchingRecipes(MealPlanError):
    failure_type = FailureType.NO_MATCHING_RECIPES
    status_code = 422
    default_message = (
        "No recipes match these preferences. "
        "Try a longer cooking time or more cuisines."
    )
