"""
Carbon estimate orchestration.

Runs one request end to end: generate raw text, interpret it, resolve carbon
values. Generator outages are logged and answered with the fallback analysis
unless settings.fallback_on_generation_error is off.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from foodprint.config import settings
from foodprint.models import DishAnalysis
from foodprint.services.ai_service import (
    ClaudeDishTextGenerator,
    ClaudeImageTextGenerator,
    GenerationError,
    RawTextGenerator,
)
from foodprint.services.carbon_service import CarbonResolver, carbon_resolver
from foodprint.services.image_service import ImagePayload
from foodprint.services.response_interpreter import (
    AnalysisMode,
    fallback_analysis,
    interpret_response,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Estimate:
    """A resolved analysis plus the metadata reported alongside it."""

    analysis: DishAnalysis
    model_used: str
    processing_time_ms: int
    analyzed_at: datetime


class EstimateService:
    """Service for turning dish names and food images into carbon estimates."""

    def __init__(
        self,
        text_generator: RawTextGenerator[str],
        vision_generator: RawTextGenerator[ImagePayload],
        resolver: CarbonResolver = carbon_resolver,
        fallback_on_generation_error: Optional[bool] = None,
    ):
        self.text_generator = text_generator
        self.vision_generator = vision_generator
        self.resolver = resolver
        self.fallback_on_generation_error = (
            settings.fallback_on_generation_error
            if fallback_on_generation_error is None
            else fallback_on_generation_error
        )

    async def estimate_dish(self, dish_name: str) -> Estimate:
        """Estimate the carbon footprint of a dish from its name."""
        return await self._estimate(self.text_generator, dish_name, dish_name, "text")

    async def estimate_image(self, image: ImagePayload) -> Estimate:
        """Estimate the carbon footprint of the dish in a validated image."""
        return await self._estimate(
            self.vision_generator, image, image.file_name, "image"
        )

    async def _estimate(
        self,
        generator: RawTextGenerator,
        source,
        context: str,
        mode: AnalysisMode,
    ) -> Estimate:
        started = time.perf_counter()

        try:
            raw_text = await generator.produce_raw_text(source)
        except GenerationError:
            if not self.fallback_on_generation_error:
                raise
            logger.exception(
                "Error generating %s analysis for %r, using fallback analysis",
                mode,
                context,
            )
            analysis = fallback_analysis(context, mode)
        else:
            analysis = interpret_response(raw_text, context, mode)

        analysis = self.resolver.resolve_analysis(analysis)

        return Estimate(
            analysis=analysis,
            model_used=generator.model,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
            analyzed_at=datetime.now(timezone.utc),
        )


def create_estimate_service() -> EstimateService:
    """Build the service wired to the Claude generators."""
    return EstimateService(
        text_generator=ClaudeDishTextGenerator(),
        vision_generator=ClaudeImageTextGenerator(),
    )
