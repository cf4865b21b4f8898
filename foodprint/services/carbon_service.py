"""
Carbon footprint resolution for ingredient lists.

Each ingredient is resolved independently in three tiers, first hit wins:
1. Exact (case-insensitive) match against the reference table
2. Fuzzy substring match, scanning the table in definition order
3. Category average, with "other" as the catch-all

The category tier always answers, so resolution never fails.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from foodprint.models import DishAnalysis, Ingredient
from foodprint.services.carbon_data import (
    CARBON_FOOTPRINT_PER_KG,
    CATEGORY_AVERAGES,
    DEFAULT_CARBON_PER_KG,
)


logger = logging.getLogger(__name__)


class MatchTier(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    CATEGORY = "category"


@dataclass(frozen=True)
class CarbonMatch:
    carbon_per_kg: Decimal
    tier: MatchTier
    matched_key: str  # table key or category label that answered


@dataclass(frozen=True)
class ResolvedIngredients:
    """Ingredients with carbon values filled in, in input order."""

    ingredients: list[Ingredient]

    @property
    def total_carbon_kg(self) -> Decimal:
        return sum((i.total_carbon_kg for i in self.ingredients), Decimal(0))

    def __iter__(self):
        return iter(self.ingredients)

    def __len__(self) -> int:
        return len(self.ingredients)


class CarbonResolver:
    """Assigns carbon-per-kg values to ingredients from a read-only table."""

    def __init__(
        self,
        table: Mapping[str, Decimal] = CARBON_FOOTPRINT_PER_KG,
        category_averages: Mapping[str, Decimal] = CATEGORY_AVERAGES,
    ):
        self.table = table
        self.category_averages = category_averages

    def match(self, name: Optional[str], category: Optional[str]) -> CarbonMatch:
        """
        Look up an ingredient and report which tier answered.

        Args:
            name: Ingredient name as returned by the model
            category: Ingredient category label (any case, may be unknown)

        Returns:
            CarbonMatch with the value, tier and the key that matched
        """
        needle = (name or "").strip().lower()

        if needle in self.table:
            return CarbonMatch(self.table[needle], MatchTier.EXACT, needle)

        # A blank name would be "contained" in every key
        if needle:
            for key in self.table:
                if key in needle or needle in key:
                    return CarbonMatch(self.table[key], MatchTier.FUZZY, key)

        label = (category or "").strip().lower()
        if label in self.category_averages:
            return CarbonMatch(
                self.category_averages[label], MatchTier.CATEGORY, label
            )
        return CarbonMatch(DEFAULT_CARBON_PER_KG, MatchTier.CATEGORY, "other")

    def resolve_one(self, name: Optional[str], category: Optional[str]) -> Decimal:
        """Return kg CO2e per kg for a single ingredient."""
        result = self.match(name, category)
        logger.debug(
            "Resolved %r (%s) via %s match %r: %s kg CO2/kg",
            name,
            category,
            result.tier.value,
            result.matched_key,
            result.carbon_per_kg,
        )
        return result.carbon_per_kg

    def resolve_all(self, ingredients: Iterable[Ingredient]) -> ResolvedIngredients:
        """
        Fill in carbon_per_kg for every ingredient.

        Inputs are not mutated; new Ingredient values are returned in the
        same order as given.
        """
        resolved = [
            replace(i, carbon_per_kg=self.resolve_one(i.name, i.category))
            for i in ingredients
        ]
        result = ResolvedIngredients(resolved)
        logger.info(
            "Carbon footprint calculated for %d ingredients. Total CO2: %.2f kg",
            len(result),
            result.total_carbon_kg,
        )
        return result

    def resolve_analysis(self, analysis: DishAnalysis) -> DishAnalysis:
        """Return a copy of the analysis with carbon values filled in."""
        resolved = self.resolve_all(analysis.ingredients)
        return replace(analysis, ingredients=resolved.ingredients)


# Singleton instance
carbon_resolver = CarbonResolver()
