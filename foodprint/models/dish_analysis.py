"""In-memory domain models for a single carbon estimate request."""

from dataclasses import dataclass, field
from decimal import Decimal


GRAMS_PER_KG = Decimal(1000)
FALLBACK_SUFFIX = " (fallback)"


@dataclass(frozen=True)
class Ingredient:
    """
    One ingredient guess for a dish.

    carbon_per_kg stays at zero until the carbon resolver fills it in;
    the response interpreter never sets it.
    """

    name: str
    category: str
    estimated_quantity_grams: Decimal = Decimal(0)
    confidence: Decimal = Decimal(0)
    carbon_per_kg: Decimal = Decimal(0)

    @property
    def total_carbon_kg(self) -> Decimal:
        return (self.estimated_quantity_grams / GRAMS_PER_KG) * self.carbon_per_kg


@dataclass(frozen=True)
class DishAnalysis:
    """Structured result of inferring a dish's ingredients."""

    dish_name: str
    analysis_method: str  # text | image | text (fallback) | image (fallback)
    ingredients: list[Ingredient] = field(default_factory=list)
    overall_confidence: Decimal = Decimal(0)

    @property
    def total_carbon_kg(self) -> Decimal:
        return sum((i.total_carbon_kg for i in self.ingredients), Decimal(0))

    @property
    def is_fallback(self) -> bool:
        return self.analysis_method.endswith(FALLBACK_SUFFIX)
