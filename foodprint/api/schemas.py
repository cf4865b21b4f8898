"""Request/response models for the estimate API (camelCase on the wire)."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from foodprint.services.estimate_service import Estimate


BLOCKED_DISH_PATTERNS = ("<script", "javascript:", "data:", "vbscript:")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Requests
# =============================================================================


class EstimateDishRequest(BaseModel):
    dish: str = Field(description="Name of the dish to analyze", examples=["Chicken Biryani"])

    @field_validator("dish")
    @classmethod
    def validate_dish(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Dish name is required")
        if not 2 <= len(value) <= 200:
            raise ValueError("Dish name must be between 2 and 200 characters")
        lowered = value.lower()
        if any(pattern in lowered for pattern in BLOCKED_DISH_PATTERNS):
            raise ValueError("Dish name contains invalid characters")
        return value


# =============================================================================
# Responses
# =============================================================================


class IngredientCarbon(CamelModel):
    name: str
    carbon_kg: float
    estimated_quantity: str
    category: str


class AnalysisMetadata(CamelModel):
    analysis_method: str
    analyzed_at: datetime
    model_used: str
    processing_time_ms: int


class CarbonFootprintResponse(CamelModel):
    dish: str
    estimated_carbon_kg: float
    confidence: float
    ingredients: list[IngredientCarbon]
    metadata: AnalysisMetadata


class ErrorResponse(CamelModel):
    code: str
    message: str
    details: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None


class ValidationErrorResponse(ErrorResponse):
    validation_errors: Optional[dict[str, list[str]]] = None


def format_quantity(grams: Decimal) -> str:
    """Whole grams with a 'g' suffix, e.g. Decimal('150.5') -> '151g'."""
    # quantize() raises past the 28-digit context precision; this does not
    return f"{grams.to_integral_value(rounding=ROUND_HALF_UP):f}g"


def build_estimate_response(estimate: Estimate) -> CarbonFootprintResponse:
    analysis = estimate.analysis
    return CarbonFootprintResponse(
        dish=analysis.dish_name,
        estimated_carbon_kg=float(analysis.total_carbon_kg),
        confidence=float(analysis.overall_confidence),
        ingredients=[
            IngredientCarbon(
                name=i.name,
                carbon_kg=float(i.total_carbon_kg),
                estimated_quantity=format_quantity(i.estimated_quantity_grams),
                category=i.category,
            )
            for i in analysis.ingredients
        ],
        metadata=AnalysisMetadata(
            analysis_method=analysis.analysis_method,
            analyzed_at=estimate.analyzed_at,
            model_used=estimate.model_used,
            processing_time_ms=estimate.processing_time_ms,
        ),
    )
