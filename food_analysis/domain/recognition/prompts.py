"""
OpenAI prompts for food recognition and nutrition estimates.

IMPORTANT: System prompts are cacheable by OpenAI.
Keep static instructions in SYSTEM_PROMPT and dynamic content in user messages.
"""

from typing import Any


# ═══════════════════════════════════════════════════════════
# SYSTEM PROMPTS (Cacheable - static instructions)
# ═══════════════════════════════════════════════════════════

VISION_SYSTEM_PROMPT = """You are an expert food recognition AI.

Your task: Analyze a food photo and list every visible food item.

RULES:
- name: short, specific food name usable for a nutrition database search
  (e.g., "grilled chicken breast", "white rice", "boiled egg")
- One entry per distinct food; do not merge a dish into one item when
  its components are clearly visible
- quantity_g: estimated grams, using plate size and cutlery for scale
- confidence: 0.0-1.0

Confidence guidelines:
- 0.9-1.0: Very clear, well-lit, unambiguous
- 0.7-0.9: Clear but some uncertainty on type/quantity
- 0.5-0.7: Visible but difficult estimation
- <0.5: Very uncertain (do not include)

Output: JSON object {"items": [{"name", "quantity_g", "confidence"}]}.
Return {"items": []} when no food is visible.
"""

NUTRITION_ESTIMATE_SYSTEM_PROMPT = """You are a nutrition database assistant.

Your task: Estimate the nutrient content of 100 g of the given food.

RULES:
- All values are per 100 g of the food as eaten
- Use typical values from food composition tables
- Use null for any value you cannot estimate; never guess 0
- matched_name: the food you estimated, in the user's language
- confidence: 0.0-1.0, how typical the food is

Output: JSON object with keys matched_name, confidence, calories,
protein_g, carbs_g, fat_g, saturated_fat_g, fiber_g, sugar_g,
sodium_mg, cholesterol_mg, vitamin_c_mg, iron_mg, calcium_mg.
Return {"matched_name": null} if the text is not a food.
"""


# ═══════════════════════════════════════════════════════════
# USER MESSAGE BUILDERS (Dynamic - not cached)
# ═══════════════════════════════════════════════════════════


def build_vision_user_message() -> str:
    """Build user message for vision analysis."""
    return (
        "Identify all foods in this photo.\n\n"
        "Remember:\n"
        "- Be specific: 'chicken breast' not 'chicken'\n"
        "- Estimate grams for each item"
    )


def build_nutrition_estimate_user_message(food_name: str) -> str:
    """Build user message for a nutrition estimate.

    Args:
        food_name: Food name exactly as the user wrote it

    Returns:
        User message text
    """
    return f"""Estimate nutrients per 100 g for:

"{food_name}"
"""


# ═══════════════════════════════════════════════════════════
# HELPER: Build complete message arrays for OpenAI
# ═══════════════════════════════════════════════════════════


def build_vision_messages(image_data_url: str) -> list[dict[str, Any]]:
    """Build complete message array for vision API.

    Args:
        image_data_url: ``data:image/...;base64,...`` URL of the photo

    Returns:
        List of message dicts for OpenAI API
    """
    return [
        {"role": "system", "content": VISION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": build_vision_user_message()},
                {"type": "image_url", "image_url": {"url": image_data_url, "detail": "high"}},
            ],
        },
    ]


def build_nutrition_estimate_messages(food_name: str) -> list[dict[str, Any]]:
    """Build complete message array for a nutrition estimate.

    Args:
        food_name: Food to estimate

    Returns:
        List of message dicts for OpenAI API
    """
    return [
        {"role": "system", "content": NUTRITION_ESTIMATE_SYSTEM_PROMPT},
        {"role": "user", "content": build_nutrition_estimate_user_message(food_name)},
    ]
