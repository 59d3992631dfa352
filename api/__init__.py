"""
Weekly Meal Planner API Package
FastAPI application, middleware and routes
"""

from .app import create_app

__all__ = ["create_app"]
