"""
AI prompt templates for menu text extraction and dish classification.

Both prompts ask for bare JSON. Responses are still parsed tolerantly
(see ai_service.extract_json_payload) because models often wrap JSON in
markdown fences or add a sentence before it.
"""

# =============================================================================
# MENU TEXT EXTRACTION (vision model)
# =============================================================================

MENU_EXTRACTION_PROMPT = """You are a restaurant menu reader.

TASK: Extract every menu item and its price from the attached image.

RULES:
- Only use text that is actually visible in the image
- Keep item names exactly as written on the menu
- Keep prices as written, including the currency symbol (e.g. "$12.50")
- If an item has no visible price, use an empty string as its price
- If the image contains no menu, or the menu text is not in English, do not guess

OUTPUT FORMAT (JSON only, no markdown code blocks, no text before or after):
{
  "Margherita Pizza": "$12.50",
  "Caesar Salad": "$9.00"
}

If there is no relevant English menu text in the image, respond with exactly:
{"error": "<short reason>"}"""


# =============================================================================
# DISH CLASSIFICATION (text model)
# =============================================================================

CLASSIFICATION_INSTRUCTIONS = """TASK:
1. Group the menu items into categories that fit this menu (for example beverages, mains, sides, desserts). Choose the categories yourself.
2. Within each category, sort every item into one of three arrays:
   - "green": the user will very likely enjoy it and it is safe for their allergies and dietary constraints
   - "orange": the user may enjoy it, or it might conflict with an allergy or constraint depending on preparation
   - "red": the user is unlikely to enjoy it, or it very likely violates an allergy or dietary constraint
3. Use item names exactly as they appear in the menu.

OUTPUT FORMAT (JSON only, no markdown code blocks, no extra prose):
{
  "Mains": {"green": ["..."], "orange": ["..."], "red": ["..."]},
  "Desserts": {"green": ["..."], "orange": ["..."], "red": ["..."]}
}"""


def _format_flavor_profile(flavor_profile: dict[str, int]) -> str:
    return "\n".join(
        f"- {name}: {level}/10" for name, level in flavor_profile.items()
    )


def build_classification_prompt(
    menu_json: str,
    flavor_profile: dict[str, int],
    allergies: list[str],
    constraints: list[str],
    special_preferences: list[str] | None = None,
) -> str:
    """
    Build the single user prompt for traffic-light dish classification.

    Args:
        menu_json: Serialized menu document (item -> price) or raw menu text
        flavor_profile: Flavor name -> 1-10 liking, already defaulted by the caller
        allergies: Allergy names
        constraints: Dietary constraint names
        special_preferences: Optional free-text notes from the user

    Returns:
        Prompt text
    """
    parts = [
        "You are a food recommendation assistant. Classify the dishes on this menu "
        "for one user based on how much they will like each dish and whether it is "
        "safe for them to eat.",
        f"MENU:\n{menu_json}",
        f"USER FLAVOR PROFILE (1 = dislikes, 10 = loves):\n{_format_flavor_profile(flavor_profile)}",
        f"ALLERGIES: {', '.join(allergies) if allergies else 'None'}",
        f"DIETARY CONSTRAINTS: {', '.join(constraints) if constraints else 'None'}",
    ]

    if special_preferences:
        notes = "\n".join(f"- {note}" for note in special_preferences)
        parts.append(f"ADDITIONAL NOTES FROM THE USER:\n{notes}")

    parts.append(CLASSIFICATION_INSTRUCTIONS)
    return "\n\n".join(parts)
