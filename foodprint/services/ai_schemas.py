"""
Pydantic models for the JSON object Claude is asked to return.

Field aliases are lower-case: the interpreter lower-cases every key before
validation so "DishName", "dishname" and "dishName" all land on dish_name.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class IngredientSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    estimated_quantity_grams: Decimal = Field(
        default=Decimal(0), alias="estimatedquantitygrams"
    )
    confidence: Decimal = Decimal(0)


class DishAnalysisSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dish_name: Optional[str] = Field(default=None, alias="dishname")
    ingredients: Optional[list[IngredientSchema]] = None
    overall_confidence: Decimal = Field(default=Decimal(0), alias="overallconfidence")


def lowercase_keys(value: Any) -> Any:
    """Recursively lower-case dict keys so field matching ignores case."""
    if isinstance(value, dict):
        return {
            str(k).lower(): lowercase_keys(v) for k, v in value.items()
        }
    if isinstance(value, list):
        return [lowercase_keys(v) for v in value]
    return value
