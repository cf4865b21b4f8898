"""
Claude AI integration for ingredient inference.

Two generators share one capability interface, RawTextGenerator:
1. Dish name -> raw analysis text (ClaudeDishTextGenerator)
2. Food image -> raw analysis text (ClaudeImageTextGenerator)

Generators return the model's text untouched; turning it into a DishAnalysis
is the response interpreter's job.
"""

import asyncio
import base64
import logging
import random
from abc import ABC, abstractmethod
from functools import wraps
from typing import Generic, Optional, TypeVar

import anthropic
import httpx
from anthropic import AsyncAnthropic

from foodprint.config import settings
from foodprint.services.image_service import ImagePayload, ImageService, image_service
from foodprint.services.prompts import (
    DISH_ANALYSIS_SYSTEM_PROMPT,
    IMAGE_ANALYSIS_SYSTEM_PROMPT,
    IMAGE_ANALYSIS_USER_MESSAGE,
    build_dish_analysis_message,
)


logger = logging.getLogger(__name__)

SourceT = TypeVar("SourceT")


class GenerationError(Exception):
    """The text or vision model could not produce a response."""

    pass


class ServiceUnavailableError(GenerationError):
    """AI service is temporarily unavailable."""

    pass


class RateLimitError(GenerationError):
    """Rate limit exceeded."""

    pass


def _backoff_seconds(base_delay: float, failures: int) -> float:
    """base_delay doubled per prior failure, with +/-10% jitter."""
    return base_delay * 2 ** (failures - 1) * random.uniform(0.9, 1.1)


def retry_on_connection_error(max_attempts=None, base_delay=1.0):
    """
    Re-issue an async Anthropic call when the connection itself fails.

    Only anthropic.APIConnectionError is retried; status errors propagate on
    the first attempt. Once every attempt has failed the caller sees
    ServiceUnavailableError.

    Args:
        max_attempts: Total calls made (default settings.anthropic_max_attempts)
        base_delay: Wait in seconds after the first failure (default 1.0)
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            attempts = max_attempts or settings.anthropic_max_attempts
            failures = 0

            while True:
                try:
                    return await func(*args, **kwargs)
                except anthropic.APIConnectionError as e:
                    failures += 1
                    if failures >= attempts:
                        logger.error(
                            "Anthropic unreachable, giving up after %d attempts", attempts
                        )
                        raise ServiceUnavailableError(
                            "AI service temporarily unavailable after retries"
                        ) from e

                    wait = _backoff_seconds(base_delay, failures)
                    logger.warning(
                        "Anthropic connection failed (%d/%d), next try in %.1fs",
                        failures,
                        attempts,
                        wait,
                    )
                    await asyncio.sleep(wait)

        return wrapper

    return decorator


def _response_text(response) -> str:
    """Concatenate the text blocks of a messages response."""
    text = ""
    for block in response.content:
        if hasattr(block, "text"):
            text += block.text
    return text


class RawTextGenerator(ABC, Generic[SourceT]):
    """
    Produces raw analysis text for a dish source.

    Implementations raise GenerationError subclasses when the upstream
    model cannot be reached; an empty string is a valid (unparsable) answer.
    """

    model: str

    @abstractmethod
    async def produce_raw_text(self, source: SourceT) -> str:
        pass


class _ClaudeGenerator:
    """Shared Anthropic client setup and error mapping."""

    def __init__(self, model: str, client: Optional[AsyncAnthropic] = None):
        if client is None:
            timeout = httpx.Timeout(
                timeout=settings.anthropic_timeout,
                connect=settings.anthropic_connect_timeout,
            )
            client = AsyncAnthropic(
                api_key=settings.anthropic_api_key, timeout=timeout, max_retries=0
            )
        self.client = client
        self.model = model

    @retry_on_connection_error()
    async def _create(self, system: str, content) -> str:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            system=system,
            messages=[{"role": "user", "content": content}],
        )
        return _response_text(response)

    async def _complete(self, system: str, content) -> str:
        try:
            text = await self._create(system, content)
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                "Too many requests, please try again in 1 minute"
            ) from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise ServiceUnavailableError("AI service error") from e
            raise GenerationError(f"Request error: {e.message}") from e

        logger.debug("Claude %s response: %s", self.model, text)
        return text


class ClaudeDishTextGenerator(_ClaudeGenerator, RawTextGenerator[str]):
    """Asks Claude for the likely ingredients of a named dish."""

    def __init__(self, client: Optional[AsyncAnthropic] = None):
        super().__init__(settings.text_model, client)

    async def produce_raw_text(self, source: str) -> str:
        logger.info("Analyzing dish: %s", source)
        return await self._complete(
            DISH_ANALYSIS_SYSTEM_PROMPT, build_dish_analysis_message(source)
        )


class ClaudeImageTextGenerator(_ClaudeGenerator, RawTextGenerator[ImagePayload]):
    """Asks Claude to identify a dish and its ingredients from a photo."""

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        images: ImageService = image_service,
    ):
        super().__init__(settings.vision_model, client)
        self.images = images

    async def produce_raw_text(self, source: ImagePayload) -> str:
        logger.info("Analyzing image: %s", source.file_name)
        image = self.images.prepare_for_upload(source)
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.media_type,
                    "data": base64.standard_b64encode(image.data).decode("utf-8"),
                },
            },
            {"type": "text", "text": IMAGE_ANALYSIS_USER_MESSAGE},
        ]
        return await self._complete(IMAGE_ANALYSIS_SYSTEM_PROMPT, content)
