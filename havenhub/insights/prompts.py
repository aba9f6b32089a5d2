"""Prompt templates for listing insights.

Separate module so the model client stays lean and the wording can evolve on
its own.
"""
from typing import Any, Mapping

SYSTEM_PROMPT_BASE = """You advise students choosing off-campus accommodation.
Be concrete and brief. Base every statement on the listing details you are given; do not invent facilities.
Return ONLY a JSON array of strings. No markdown, no prose around it.
""".strip()


def _field(listing: Mapping[str, Any], key: str) -> str:
    value = listing.get(key)
    return "" if value is None else str(value)


def build_insight_prompt(listing: Mapping[str, Any]) -> str:
    """Return the user prompt describing one listing.

    Missing fields render as blanks rather than failing; amenities may be
    absent or a non-list.
    """
    amenities = listing.get("amenities") or []
    if not isinstance(amenities, (list, tuple)):
        amenities = [amenities]
    return (
        "Analyze this student accommodation property and provide 3 key insights for a student looking to rent it.\n"
        "Focus on location convenience, amenities value, and student lifestyle suitability.\n\n"
        f"Property Title: {_field(listing, 'title')}\n"
        f"Location: {_field(listing, 'location')}\n"
        f"Price: ${_field(listing, 'price')}/month\n"
        f"Room Type: {_field(listing, 'roomType')}\n"
        f"Amenities: {', '.join(str(a) for a in amenities)}\n"
        f"Description: {_field(listing, 'description')}\n"
        f"Walk Time to Campus: {_field(listing, 'walkTime')} minutes\n\n"
        "Format the output as a JSON array of strings, like this:\n"
        '["Insight 1", "Insight 2", "Insight 3"]\n'
        "Do not include any markdown formatting or explanations, just the raw JSON array."
    )
