"""Assistant prompts and response parsing - Pure functions.

Builds the text sent to the generative model and parses its structured
replies. The AI call itself lives in the shell (Gemini client).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from quakewatch.core.event import SeismicEvent


logger = logging.getLogger(__name__)


ANALYSIS_FALLBACK = "বর্তমানে কোনো বিশ্লেষণ পাওয়া যাচ্ছে না।"
ANALYSIS_ERROR = (
    "নেটওয়ার্ক সমস্যার কারণে বিশ্লেষণ দেখানো যাচ্ছে না। "
    "অনুগ্রহ করে পরে আবার চেষ্টা করুন।"
)
CHAT_FALLBACK = "দুঃখিত, আমি এখন উত্তর দিতে পারছি না।"
CHAT_ERROR = "নেটওয়ার্ক সমস্যার কারণে উত্তর দেওয়া যাচ্ছে না।"

DEFAULT_LOCATION_NAME = "Identified Location"

# Events included in the analysis prompt
ANALYSIS_EVENT_LIMIT = 5

LOCATION_PROMPT = (
    "Identify the geographic location shown in this image. "
    "If you can identify a specific landmark, city, or place, return its "
    "latitude and longitude coordinates and a short name (in English)."
)

LOCATION_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "identified": {"type": "BOOLEAN", "description": "Whether the location was identified"},
        "lat": {"type": "NUMBER", "description": "Latitude"},
        "lng": {"type": "NUMBER", "description": "Longitude"},
        "name": {"type": "STRING", "description": "Name of the location"},
    },
    "required": ["identified"],
}


@dataclass(frozen=True)
class LocationGuess:
    """Coordinates suggested for a new zone.

    Ordinary zone-creation input: the usual zone validation still applies.
    """
    latitude: float
    longitude: float
    name: str


def build_analysis_prompt(events: list[SeismicEvent], limit: int = ANALYSIS_EVENT_LIMIT) -> str:
    """Build the seismic-analysis prompt from the strongest events.

    Pure function. Only the top events by magnitude are included to keep
    the prompt short.
    """
    strongest = sorted(events, key=lambda e: e.magnitude, reverse=True)[:limit]
    lines = "\n".join(f"- Magnitude {e.magnitude} at {e.place}" for e in strongest)

    return (
        "Recent earthquakes data:\n"
        f"{lines}\n\n"
        "Act as a safety expert. Provide a concise summary in Bengali (Bangla) "
        "about these recent seismic activities.\n"
        "Then, provide 3 very important, short bullet points on earthquake "
        "safety tips in Bengali.\n"
        "Keep the tone calm but alert. Do not use markdown formatting like "
        "** bold, just plain text or simple bullets."
    )


def build_chat_prompt(message: str) -> str:
    """Build the safety-chat prompt for a user question.

    Pure function.
    """
    return (
        f'User question: "{message}"\n\n'
        "You are a helpful, calm, and knowledgeable earthquake safety expert assistant.\n"
        "Answer the user's question in Bengali (Bangla).\n"
        "Keep the answer concise, practical, and easy to understand.\n"
        "If the question is not related to safety, disasters, or earthquakes, "
        "politely guide them back to the topic.\n"
        "Do not use markdown formatting like ** bold, just plain text."
    )


def parse_location_response(text: str | None) -> LocationGuess | None:
    """Parse the model's JSON reply to the location prompt.

    Pure function.

    Args:
        text: Raw JSON text returned by the model

    Returns:
        LocationGuess if the model identified a place with numeric
        coordinates, otherwise None
    """
    if not text:
        return None

    try:
        data = json.loads(text)
    except ValueError:
        logger.warning("Location reply is not valid JSON")
        return None

    if not isinstance(data, dict) or not data.get("identified"):
        return None

    lat, lng = data.get("lat"), data.get("lng")
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None

    return LocationGuess(
        latitude=float(lat),
        longitude=float(lng),
        name=data.get("name") or DEFAULT_LOCATION_NAME,
    )
