"""
Request and Response models for the Weekly Meal Planner API
Standardized response envelope and sanitized request bodies
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from planner.models import MealPlan, UserPreferences
from .sanitize import sanitize_value


class ErrorType(str, Enum):
    """Error types for standardized error handling"""
    VALIDATION_ERROR = "validation_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    NO_MATCHING_RECIPES = "no_matching_recipes"
    DELIVERY_FAILED = "delivery_failed"
    INTERNAL_ERROR = "internal_error"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseResponse(ApiModel):
    """Base response model for all API responses"""
    success: bool
    message: Optional[str] = None
    response_time: Optional[str] = None


class ErrorResponse(BaseResponse):
    """Standardized error response"""
    success: bool = False
    error: str
    error_type: ErrorType
    errors: Optional[List[str]] = None
    request_id: Optional[str] = None


class MealPlanResponse(BaseResponse):
    """Response model for meal plan generation"""
    success: bool = True
    data: MealPlan


class SlackResponse(BaseResponse):
    """Response model for Slack delivery"""
    success: bool = True


class HealthResponse(BaseModel):
    """Health check response; snake_case like the other monitoring routes, not the camelCase API envelope"""
    status: str
    service: str
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: Dict[str, bool] = Field(default_factory=dict)
    ai_mode: str
    catalog_size: int
    uptime: Optional[float] = None


class GenerateMealPlanRequest(UserPreferences):
    """Meal plan request body, sanitized before validation"""

    @model_validator(mode="before")
    @classmethod
    def sanitize(cls, data: Any) -> Any:
        return sanitize_value(data)


class SlackMeal(ApiModel):
    day: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    cooking_time: Optional[str] = None
    cuisine: Optional[str] = None


class SendToSlackRequest(ApiModel):
    """Meal plan body for Slack delivery; trimmed, not HTML-escaped"""
    meals: List[SlackMeal] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def sanitize(cls, data: Any) -> Any:
        return sanitize_value(data, escape=False)
