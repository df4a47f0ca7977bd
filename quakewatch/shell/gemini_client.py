"""Gemini Client - Imperative Shell.

This module handles HTTP communication with the Gemini generateContent
REST endpoint. All I/O is contained here; prompts and reply parsing are
in the core module.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any

import requests


logger = logging.getLogger(__name__)


GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_MODEL = "gemini-2.5-flash"

# Default timeout for generation requests (seconds)
DEFAULT_TIMEOUT = 60


@dataclass
class GeminiResponse:
    """Response from a generation request.

    Attributes:
        success: Whether the request returned text
        text: Generated text (None if empty or failed)
        status_code: HTTP status code (0 if no response)
        error: Error message if failed
    """
    success: bool
    text: str | None = None
    status_code: int = 0
    error: str | None = None


def text_part(text: str) -> dict[str, Any]:
    """Build a text content part."""
    return {"text": text}


def image_part(image_bytes: bytes, mime_type: str) -> dict[str, Any]:
    """Build an inline image content part."""
    return {
        "inlineData": {
            "mimeType": mime_type,
            "data": base64.b64encode(image_bytes).decode("ascii"),
        }
    }


class GeminiClient:
    """Client for the Gemini text and vision model.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_payload(
        self,
        parts: list[dict[str, Any]],
        response_schema: dict[str, Any] | None,
    ) -> dict[str, Any]:
        generation_config: dict[str, Any] = {
            # Low latency
            "thinkingConfig": {"thinkingBudget": 0},
        }
        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = response_schema

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str | None:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        return text or None

    def generate(
        self,
        parts: list[dict[str, Any]],
        response_schema: dict[str, Any] | None = None,
    ) -> GeminiResponse:
        """Run one generation request.

        This method performs HTTP I/O.

        Args:
            parts: Content parts (text and/or inline images)
            response_schema: JSON schema to request structured output

        Returns:
            GeminiResponse indicating success or failure
        """
        logger.info("Sending generation request to %s", self.model)

        try:
            response = requests.post(
                self.endpoint,
                params={"key": self.api_key},
                json=self._build_payload(parts, response_schema),
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        except requests.Timeout:
            logger.error("Gemini request timed out")
            return GeminiResponse(success=False, error="Request timed out")
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", str(e))
            return GeminiResponse(success=False, error=str(e))

        if response.status_code != 200:
            logger.warning(
                "Gemini returned non-200: %d - %s",
                response.status_code,
                response.text,
            )
            return GeminiResponse(
                success=False,
                status_code=response.status_code,
                error=response.text,
            )

        try:
            text = self._extract_text(response.json())
        except ValueError as e:
            logger.error("Gemini returned invalid JSON: %s", str(e))
            return GeminiResponse(
                success=False,
                status_code=response.status_code,
                error="Invalid JSON response",
            )

        return GeminiResponse(
            success=text is not None,
            text=text,
            status_code=response.status_code,
            error=None if text is not None else "Empty response",
        )

    def generate_text(self, prompt: str) -> GeminiResponse:
        """Generate free text from a prompt."""
        return self.generate([text_part(prompt)])
