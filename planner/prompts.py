"""
Prompt templates for weekly meal plan generation
"""

from typing import Iterable

from .models import UserPreferences

SYSTEM_PROMPT = """You are an expert meal planning assistant. Generate exactly 7 unique dinner meal suggestions for one week based on the provided user preferences. Return your response as valid JSON only.

Required JSON structure:
{
  "meals": [
    {
      "day": "Monday",
      "title": "Meal Name",
      "description": "Brief 2-3 sentence description",
      "cookingTime": "estimated minutes",
      "cuisine": "cuisine type"
    }
  ]
}

Requirements:
- One meal for each day from Monday to Sunday
- Each meal must be unique and different
- Respect all dietary restrictions provided
- Stay within specified cooking time limits
- Include variety of cuisines as requested
- Avoid ingredients listed as dislikes
- Meals should be suitable for specified family size"""


def _format_list(items: Iterable) -> str:
    values = [getattr(item, "value", item) for item in items or []]
    if not values:
        return "None"
    return ", ".join(values)


def build_user_prompt(preferences: UserPreferences) -> str:
    """Render validated preferences as the user instruction"""
    noun = "person" if preferences.family_size == 1 else "people"

    lines = [
        f"Generate a weekly meal plan for {preferences.family_size} {noun} with the following preferences:",
        f"- Dietary restrictions: {_format_list(preferences.dietary_restrictions)}",
        f"- Preferred cooking time: {preferences.cooking_time.value}",
        f"- Cuisine preferences: {_format_list(preferences.cuisine_preferences)}",
    ]

    if preferences.disliked_ingredients:
        lines.append(f"- Disliked ingredients: {preferences.disliked_ingredients}")

    if preferences.additional_notes:
        lines.append(f"- Additional notes: {preferences.additional_notes}")

    return "\n".join(lines) + "\n"
