"""Safety Assistant - AI collaborators.

Seismic analysis, safety chat and location-from-image, all served by the
Gemini client. Every operation degrades to a fixed fallback (or None) when
the model is unreachable, unconfigured or returns nothing; failures never
touch alert evaluation.
"""

import logging

from quakewatch.core.event import SeismicEvent
from quakewatch.core.prompts import (
    ANALYSIS_ERROR,
    ANALYSIS_FALLBACK,
    CHAT_ERROR,
    CHAT_FALLBACK,
    LOCATION_PROMPT,
    LOCATION_RESPONSE_SCHEMA,
    LocationGuess,
    build_analysis_prompt,
    build_chat_prompt,
    parse_location_response,
)
from quakewatch.shell.gemini_client import GeminiClient, image_part, text_part


logger = logging.getLogger(__name__)


class SafetyAssistant:
    """Advisory AI features on top of a generative model client."""

    def __init__(self, client: GeminiClient | None) -> None:
        """Initialize assistant.

        Args:
            client: Gemini client, or None when no API key is configured
        """
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def analyze(self, events: list[SeismicEvent]) -> str:
        """Summarize recent seismic activity with safety tips.

        Returns:
            Model text, or a fallback message
        """
        if self.client is None:
            return ANALYSIS_FALLBACK
        if not events:
            return ANALYSIS_FALLBACK

        response = self.client.generate_text(build_analysis_prompt(events))
        if response.success:
            return response.text
        if response.status_code == 0:
            return ANALYSIS_ERROR
        return ANALYSIS_FALLBACK

    def chat(self, message: str) -> str:
        """Answer a safety question.

        Returns:
            Model text, or a fallback message
        """
        if not message.strip():
            return CHAT_FALLBACK
        if self.client is None:
            return CHAT_FALLBACK

        response = self.client.generate_text(build_chat_prompt(message))
        if response.success:
            return response.text
        if response.status_code == 0:
            return CHAT_ERROR
        return CHAT_FALLBACK

    def locate(self, image_bytes: bytes, mime_type: str) -> LocationGuess | None:
        """Suggest coordinates for a zone from a photo.

        Returns:
            LocationGuess if the model identified a place, else None
        """
        if self.client is None or not image_bytes:
            return None

        response = self.client.generate(
            [image_part(image_bytes, mime_type), text_part(LOCATION_PROMPT)],
            response_schema=LOCATION_RESPONSE_SCHEMA,
        )
        if not response.success:
            logger.warning("Location lookup failed: %s", response.error)
            return None

        guess = parse_location_response(response.text)
        if guess is None:
            logger.info("Model could not identify a location")
        return guess
