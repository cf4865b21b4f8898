"""
Interpretation of raw model output into a DishAnalysis.

The text and vision generators return loosely structured text: usually a JSON
object, sometimes wrapped in prose or markdown fences, occasionally garbage.
parse_response() slices the outermost braces and validates the result;
it returns Parsed or Unparsable instead of raising. interpret_response()
maps Unparsable onto a deterministic fallback analysis.

Known limitation: the slice runs from the first "{" to the last "}", so prose
containing its own braces around the JSON makes the slice undecodable and
the fallback is used.
"""

import json
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from pathlib import PurePath
from typing import Literal, Union

from pydantic import ValidationError

from foodprint.models import FALLBACK_SUFFIX, DishAnalysis, Ingredient
from foodprint.services.ai_schemas import DishAnalysisSchema, lowercase_keys


logger = logging.getLogger(__name__)

AnalysisMode = Literal["text", "image"]

UNKNOWN_INGREDIENT_NAME = "Unknown"
DEFAULT_INGREDIENT_CATEGORY = "other"


@dataclass(frozen=True)
class Parsed:
    analysis: DishAnalysis


@dataclass(frozen=True)
class Unparsable:
    reason: str


ParseResult = Union[Parsed, Unparsable]


_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def _fix_trailing_commas(text: str) -> str:
    """Drop a comma that directly precedes a closing brace or bracket."""
    return _TRAILING_COMMA.sub(r"\1", text)


def _extract_json_object(content: str) -> str | None:
    """Slice from the first '{' to the last '}' inclusive."""
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return content[start : end + 1]


def image_dish_name(file_name: str) -> str:
    """Dish name derived from an uploaded file name, extension stripped."""
    return PurePath(file_name).stem or file_name


def parse_response(content: str | None, context: str, mode: AnalysisMode) -> ParseResult:
    """
    Parse raw model output into a DishAnalysis.

    Args:
        content: Raw response text (may be empty or malformed)
        context: Dish name (text mode) or uploaded file name (image mode)
        mode: "text" or "image"

    Returns:
        Parsed(analysis) on success, Unparsable(reason) otherwise
    """
    if not content:
        return Unparsable("empty response")

    json_str = _extract_json_object(content)
    if json_str is None:
        return Unparsable("no JSON object found in response")

    # ValueError covers JSONDecodeError and over-long integer literals;
    # RecursionError comes from pathologically nested arrays or objects
    try:
        data = json.loads(_fix_trailing_commas(json_str), parse_float=Decimal)
    except (ValueError, RecursionError) as e:
        return Unparsable(f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return Unparsable("response JSON is not an object")

    try:
        schema = DishAnalysisSchema.model_validate(lowercase_keys(data))
    except ValidationError as e:
        return Unparsable(f"schema validation failed: {e}")
    except (ValueError, RecursionError) as e:
        return Unparsable(f"could not decode response: {e}")

    if schema.ingredients is None:
        return Unparsable("response has no ingredient list")

    ingredients = [
        Ingredient(
            name=item.name if item.name is not None else UNKNOWN_INGREDIENT_NAME,
            category=(
                item.category
                if item.category is not None
                else DEFAULT_INGREDIENT_CATEGORY
            ),
            estimated_quantity_grams=item.estimated_quantity_grams,
            confidence=item.confidence,
            carbon_per_kg=Decimal(0),  # Filled in by the carbon resolver
        )
        for item in schema.ingredients
    ]

    if mode == "image":
        dish_name = (schema.dish_name or "").strip() or image_dish_name(context)
    else:
        dish_name = context

    return Parsed(
        DishAnalysis(
            dish_name=dish_name,
            ingredients=ingredients,
            overall_confidence=schema.overall_confidence,
            analysis_method=mode,
        )
    )


# =============================================================================
# FALLBACK ANALYSIS
# =============================================================================


def _guess(name: str, category: str, grams: int, confidence: str) -> Ingredient:
    return Ingredient(
        name=name,
        category=category,
        estimated_quantity_grams=Decimal(grams),
        confidence=Decimal(confidence),
    )


def _keyword_ingredients(dish_name: str) -> list[Ingredient]:
    dish = dish_name.lower()
    ingredients: list[Ingredient] = []

    if "chicken" in dish:
        ingredients.append(_guess("Chicken", "protein", 150, "0.8"))
        if "biryani" in dish:
            ingredients.extend(
                [
                    _guess("Basmati Rice", "grain", 200, "0.9"),
                    _guess("Onions", "vegetable", 50, "0.7"),
                    _guess("Spices", "spice", 10, "0.8"),
                    _guess("Cooking Oil", "oil", 15, "0.7"),
                ]
            )
    elif "beef" in dish:
        ingredients.append(_guess("Beef", "protein", 150, "0.8"))
    elif "pizza" in dish:
        ingredients.extend(
            [
                _guess("Wheat Flour", "grain", 100, "0.8"),
                _guess("Cheese", "dairy", 80, "0.9"),
                _guess("Tomato Sauce", "vegetable", 30, "0.8"),
            ]
        )
    elif "rice" in dish or "biryani" in dish:
        ingredients.append(_guess("Rice", "grain", 200, "0.8"))

    return ingredients


def fallback_analysis(context: str, mode: AnalysisMode) -> DishAnalysis:
    """
    Build a deterministic analysis without any model output.

    Text mode applies keyword heuristics to the dish name. Image mode has no
    heuristics since file names say little about the food.
    """
    if mode == "image":
        return DishAnalysis(
            dish_name=image_dish_name(context),
            ingredients=[_guess("Mixed ingredients", "other", 250, "0.3")],
            overall_confidence=Decimal("0.3"),
            analysis_method=mode + FALLBACK_SUFFIX,
        )

    ingredients = _keyword_ingredients(context) or [
        _guess("Mixed ingredients", "other", 250, "0.5")
    ]
    return DishAnalysis(
        dish_name=context,
        ingredients=ingredients,
        overall_confidence=Decimal("0.7"),
        analysis_method=mode + FALLBACK_SUFFIX,
    )


def interpret_response(
    content: str | None, context: str, mode: AnalysisMode
) -> DishAnalysis:
    """Parse model output, falling back to heuristics when it is unusable."""
    result = parse_response(content, context, mode)
    if isinstance(result, Parsed):
        return result.analysis

    logger.warning(
        "Could not interpret %s analysis response for %r (%s), using fallback",
        mode,
        context,
        result.reason,
    )
    return fallback_analysis(context, mode)
