"""
API Routes Package for the Weekly Meal Planner
"""

from .health import router as health_router
from .meal_plans import router as meal_plans_router

__all__ = [
    "health_router",
    "meal_plans_router",
]
