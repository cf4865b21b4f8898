"""
Domain models for Foodprint.

Nothing here is persisted; every instance lives for one request.
"""

from foodprint.models.dish_analysis import (
    FALLBACK_SUFFIX,
    DishAnalysis,
    Ingredient,
)

__all__ = [
    "FALLBACK_SUFFIX",
    "DishAnalysis",
    "Ingredient",
]
