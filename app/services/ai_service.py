"""
External AI integration for the menu pipeline.

Two calls against an OpenAI-compatible chat completions endpoint:
1. Menu text extraction from an image (vision model)
2. Traffic-light dish classification against a user's preferences (text model)

Neither call raises to its caller. Every failure comes back as a structured
error document, {"error": "<reason>"}, so callers check for the "error" key.
"""

import json
import re
import base64
import asyncio
import random
import logging
from functools import wraps

import httpx
from pydantic import TypeAdapter, ValidationError

from app.config import Settings, settings
from app.services.preference_schemas import (
    ClassificationPreferences,
    TrafficLightSchema,
)
from app.services.prompts import MENU_EXTRACTION_PROMPT, build_classification_prompt


logger = logging.getLogger(__name__)


NO_TEXT_ERROR = "There was no text in the image you uploaded"
INVALID_JSON_ERROR = "Invalid JSON response."
NON_ENGLISH_ERROR = "Currently we only work with English text."
NOT_MENU_ERROR = "The uploaded image does not contain menu-relevant information."
EMPTY_CLASSIFICATION_ERROR = "The AI service returned an empty classification."
INVALID_CLASSIFICATION_ERROR = "Invalid classification response."

_LATIN_LETTER_RE = re.compile(r"[A-Za-z]")
_MENU_KEYWORD_RE = re.compile(r"menu|dish|price|meal|drink|food", re.IGNORECASE)
_PRICE_RE = re.compile(r"[$€£¥₹]\s?\d|\d+[.,]\d{2}\b")
_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*|\s*```$")

# Connection never established: safe to send again
_RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)

_CLASSIFICATION_ADAPTER = TypeAdapter(dict[str, TrafficLightSchema])


def _strip_markdown_fences(text: str) -> str:
    """Strip leading/trailing markdown code fence markers (```json ... ```)."""
    return _FENCE_RE.sub("", text.strip()).strip()


def _fix_trailing_commas(text: str) -> str:
    """Fix trailing commas in JSON (common LLM error)."""
    text = re.sub(r",\s*}", "}", text)
    text = re.sub(r",\s*]", "]", text)
    return text


def extract_json_payload(text: str):
    """
    Parse the JSON value embedded in free-form model output.

    Takes the substring from the first "{" or "[" to the last matching
    closing bracket, so surrounding prose and code fences are ignored.
    A second attempt is made with trailing commas removed.

    Raises:
        ValueError: No JSON value found, or it does not parse
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise ValueError("No JSON value found in AI response")

    start = min(starts)
    closing = "}" if text[start] == "{" else "]"
    end = text.rfind(closing)
    if end < start:
        raise ValueError("Unterminated JSON value in AI response")

    candidate = text[start : end + 1]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return json.loads(_fix_trailing_commas(candidate))


def _is_english(text: str) -> bool:
    return bool(_LATIN_LETTER_RE.search(text))


def _is_menu_relevant(text: str) -> bool:
    return bool(_MENU_KEYWORD_RE.search(text) or _PRICE_RE.search(text))


def _document_text(value) -> str:
    """Keys and string values of a parsed document, without JSON literals."""
    if isinstance(value, dict):
        return " ".join(
            f"{key} {_document_text(item)}" for key, item in value.items()
        )
    if isinstance(value, list):
        return " ".join(_document_text(item) for item in value)
    return value if isinstance(value, str) else ""


def retry_on_connection_error(func):
    """
    Retry an AIService coroutine when the connection could not be established.

    Attempts and backoff come from the service's config (ai_max_attempts,
    ai_retry_base_delay). HTTP error statuses are returned, never retried.
    """

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        max_attempts = max(1, self.config.ai_max_attempts)
        base_delay = self.config.ai_retry_base_delay
        last_exception = None

        for attempt in range(max_attempts):
            try:
                return await func(self, *args, **kwargs)
            except _RETRYABLE_ERRORS as e:
                last_exception = e

                if attempt < max_attempts - 1:
                    # Exponential backoff with jitter
                    delay = base_delay * (2**attempt)
                    jitter = delay * 0.1 * (2 * random.random() - 1)
                    sleep_time = max(0.0, delay + jitter)

                    logger.warning(
                        "Connection error on attempt %d/%d, retrying in %.1fs...",
                        attempt + 1,
                        max_attempts,
                        sleep_time,
                    )
                    await asyncio.sleep(sleep_time)
                else:
                    logger.error("All %d attempts failed", max_attempts)

        raise ServiceUnavailableError(
            "AI service temporarily unavailable after retries"
        ) from last_exception

    return wrapper


class AIService:
    """Menu extraction and dish classification over the chat completions API."""

    def __init__(
        self,
        config: Settings = settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport
        self.timeout = httpx.Timeout(
            timeout=config.ai_timeout,
            connect=config.ai_connect_timeout,
        )

    # =========================================================================
    # HTTP
    # =========================================================================

    @retry_on_connection_error
    async def _post_chat_completion(self, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            return await client.post(
                self.config.openai_api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.openai_api_key}"},
            )

    @staticmethod
    def _message_content(body: dict) -> str:
        """Return choices[0].message.content, or "" when the shape is off."""
        choices = body.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content")
        return content if isinstance(content, str) else ""

    # =========================================================================
    # MENU TEXT EXTRACTION
    # =========================================================================

    async def extract_menu_items(
        self, image_bytes: bytes, media_type: str = "image/jpeg"
    ) -> dict:
        """
        Extract menu items and prices from a menu photo.

        Args:
            image_bytes: Raw image content
            media_type: MIME type used in the data URI

        Returns:
            {"Margherita Pizza": "$12.50", ...} on success, otherwise
            {"error": "<reason>"}. Model-reported errors pass through unchanged.
        """
        try:
            image_data = base64.standard_b64encode(image_bytes).decode("utf-8")

            payload = {
                "model": self.config.vision_model,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": MENU_EXTRACTION_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": f"data:{media_type};base64,{image_data}"
                                },
                            },
                        ],
                    }
                ],
                "temperature": 0,
                "top_p": 1,
                "max_tokens": self.config.extraction_max_tokens,
                "n": 1,
            }

            response = await self._post_chat_completion(payload)
            if not response.is_success:
                logger.warning(
                    "Menu extraction got HTTP %d from AI service", response.status_code
                )
                return {"error": f"Non-OK HTTP status: {response.status_code}"}

            content = _strip_markdown_fences(self._message_content(response.json()))
            if not content:
                return {"error": NO_TEXT_ERROR}

            try:
                parsed = extract_json_payload(content)
            except ValueError:
                logger.warning("Menu extraction returned non-JSON content: %.200s", content)
                return {"error": INVALID_JSON_ERROR}

            if not isinstance(parsed, dict):
                return {"error": INVALID_JSON_ERROR}

            if "error" in parsed:
                return parsed

            if not parsed:
                return {"error": NO_TEXT_ERROR}

            serialized = json.dumps(parsed, ensure_ascii=False)
            if not _is_english(_document_text(parsed)):
                return {"error": NON_ENGLISH_ERROR}
            if not _is_menu_relevant(serialized):
                return {"error": NOT_MENU_ERROR}

            return parsed

        except Exception as e:
            logger.error("Menu extraction failed: %s", e)
            return {"error": str(e)}

    # =========================================================================
    # DISH CLASSIFICATION
    # =========================================================================

    async def classify_dishes(
        self,
        menu: dict | str,
        preferences: ClassificationPreferences | dict | None = None,
    ) -> dict:
        """
        Bucket menu items into model-chosen categories and green/orange/red tiers.

        Args:
            menu: Extracted menu document (item -> price) or raw menu text
            preferences: Flavor profile, allergies and constraints. An empty
                flavor profile falls back to DEFAULT_FLAVOR_PROFILE.

        Returns:
            {"Mains": {"green": [...], "orange": [...], "red": [...]}, ...}
            or {"error": "<reason>"}
        """
        try:
            if isinstance(menu, dict) and "error" in menu:
                return menu

            if not isinstance(preferences, ClassificationPreferences):
                preferences = ClassificationPreferences.model_validate(
                    preferences or {}
                )

            menu_json = menu if isinstance(menu, str) else json.dumps(
                menu, ensure_ascii=False
            )
            prompt = build_classification_prompt(
                menu_json=menu_json,
                flavor_profile=preferences.effective_flavor_profile(),
                allergies=preferences.allergies,
                constraints=preferences.constraints,
                special_preferences=preferences.special_preferences,
            )

            payload = {
                "model": self.config.classification_model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0,
                "top_p": 1,
                "max_tokens": self.config.classification_max_tokens,
                "n": 1,
            }

            response = await self._post_chat_completion(payload)
            if not response.is_success:
                logger.warning(
                    "Dish classification got HTTP %d from AI service",
                    response.status_code,
                )
                return {"error": f"Non-OK HTTP status: {response.status_code}"}

            content = _strip_markdown_fences(self._message_content(response.json()))
            if not content:
                return {"error": EMPTY_CLASSIFICATION_ERROR}

            try:
                parsed = extract_json_payload(content)
            except ValueError:
                logger.warning("Dish classification returned non-JSON content: %.200s", content)
                return {"error": INVALID_JSON_ERROR}

            if not isinstance(parsed, dict):
                return {"error": INVALID_JSON_ERROR}

            if "error" in parsed:
                return parsed

            try:
                validated = _CLASSIFICATION_ADAPTER.validate_python(parsed)
            except ValidationError as e:
                logger.warning("Dish classification failed schema validation: %s", e)
                return {"error": INVALID_CLASSIFICATION_ERROR}

            return {
                category: tiers.model_dump() for category, tiers in validated.items()
            }

        except Exception as e:
            logger.error("Dish classification failed: %s", e)
            return {"error": str(e)}


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class ServiceUnavailableError(Exception):
    """AI service could not be reached after retries."""

    pass
