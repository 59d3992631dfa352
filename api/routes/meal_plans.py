"""
Meal plan routes
Plan generation, Slack delivery and the preference options the form offers
"""

from fastapi import APIRouter, Depends, Request
import structlog

from planner import MealPlanner, SlackNotifier
from planner.models import (
    MAX_DISLIKED_LENGTH,
    MAX_FAMILY_SIZE,
    MAX_NOTES_LENGTH,
    MIN_FAMILY_SIZE,
    CookingTime,
    CuisineType,
    DietaryRestriction,
)
from ..middleware import error_json, response_time
from ..models import (
    ErrorResponse,
    ErrorType,
    GenerateMealPlanRequest,
    MealPlanResponse,
    SendToSlackRequest,
    SlackResponse,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["Meal Plans"])


def get_meal_planner(request: Request) -> MealPlanner:
    """FastAPI dependency returning the planner built at startup"""
    return request.app.state.meal_planner


def get_slack_notifier(request: Request) -> SlackNotifier:
    return request.app.state.slack_notifier


@router.post(
    "/generate-meal-plan",
    response_model=MealPlanResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def generate_meal_plan(
    body: GenerateMealPlanRequest,
    request: Request,
    planner: MealPlanner = Depends(get_meal_planner),
):
    """Generate a weekly dinner plan from household preferences"""
    logger.info(
        "Meal plan request received",
        request_id=getattr(request.state, "request_id", None),
        family_size=body.family_size,
        restrictions=[r.value for r in body.dietary_restrictions],
        cooking_time=body.cooking_time.value,
        cuisines=[c.value for c in body.cuisine_preferences],
    )

    plan = await planner.generate(body)

    elapsed = response_time(request)
    logger.info("Meal plan generated", source=plan.source.value, response_time=elapsed)

    return MealPlanResponse(
        data=plan,
        message="Meal plan generated successfully",
        response_time=elapsed,
    )


@router.post(
    "/send-to-slack",
    response_model=SlackResponse,
    responses={500: {"model": ErrorResponse}},
)
async def send_to_slack(
    body: SendToSlackRequest,
    request: Request,
    notifier: SlackNotifier = Depends(get_slack_notifier),
):
    """Send a meal plan to the configured Slack channel"""
    logger.info("Slack send request received", meals=len(body.meals))

    result = await notifier.send([meal.model_dump(by_alias=True) for meal in body.meals])

    if not result.success:
        return error_json(500, ErrorType.DELIVERY_FAILED, result.message, request)

    return SlackResponse(message=result.message, response_time=response_time(request))


@router.get("/preference-options")
async def get_preference_options():
    """Choices and limits accepted by the meal plan endpoint"""
    return {
        "dietary_restrictions": [r.value for r in DietaryRestriction],
        "cooking_times": [t.value for t in CookingTime],
        "cuisines": [c.value for c in CuisineType],
        "family_size": {"min": MIN_FAMILY_SIZE, "max": MAX_FAMILY_SIZE},
        "max_lengths": {
            "disliked_ingredients": MAX_DISLIKED_LENGTH,
            "additional_notes": MAX_NOTES_LENGTH,
        },
    }
