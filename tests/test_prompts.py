"""
Prompt rendering tests
"""

from planner import UserPreferences, build_user_prompt
from planner.prompts import SYSTEM_PROMPT


def _prefs(**overrides):
    values = {
        "family_size": 4,
        "dietary_restrictions": ["Vegetarian", "Gluten-free"],
        "cooking_time": "30 minutes",
        "cuisine_preferences": ["Italian", "Indian"],
    }
    values.update(overrides)
    return UserPreferences(**values)


class TestBuildUserPrompt:
    """Preferences rendered as the user instruction"""

    def test_full_prompt(self):
        prompt = build_user_prompt(_prefs(disliked_ingredients="mushrooms", additional_notes="Kids eat early"))

        assert prompt == (
            "Generate a weekly meal plan for 4 people with the following preferences:\n"
            "- Dietary restrictions: Vegetarian, Gluten-free\n"
            "- Preferred cooking time: 30 minutes\n"
            "- Cuisine preferences: Italian, Indian\n"
            "- Disliked ingredients: mushrooms\n"
            "- Additional notes: Kids eat early\n"
        )

    def test_single_person(self):
        prompt = build_user_prompt(_prefs(family_size=1))
        assert prompt.startswith("Generate a weekly meal plan for 1 person with")

    def test_optional_lines_omitted_when_empty(self):
        prompt = build_user_prompt(_prefs(disliked_ingredients="", additional_notes=None))

        assert "Disliked ingredients" not in prompt
        assert "Additional notes" not in prompt
        assert prompt.endswith("- Cuisine preferences: Italian, Indian\n")

    def test_duplicate_choices_listed_once(self):
        prompt = build_user_prompt(_prefs(cuisine_preferences=["Asian", "Asian", "Mexican"]))
        assert "- Cuisine preferences: Asian, Mexican\n" in prompt

    def test_system_prompt_describes_contract(self):
        for field in ('"day"', '"title"', '"description"', '"cookingTime"', '"cuisine"'):
            assert field in SYSTEM_PROMPT
        assert "exactly 7" in SYSTEM_PROMPT
