"""
Static carbon footprint reference data.

Values are kg CO2-equivalent per kg of ingredient produced, compiled from
published life-cycle assessments. Both mappings are read-only views built
once at import time.

Key order in CARBON_FOOTPRINT_PER_KG matters: fuzzy matching takes the first
key that overlaps the ingredient name, so reordering entries changes results.
"""

from decimal import Decimal
from types import MappingProxyType


def _d(value: str) -> Decimal:
    return Decimal(value)


CARBON_FOOTPRINT_PER_KG = MappingProxyType(
    {
        # Proteins
        "beef": _d("27.0"),
        "lamb": _d("24.5"),
        "pork": _d("7.6"),
        "chicken": _d("6.1"),
        "turkey": _d("5.8"),
        "fish": _d("5.4"),
        "salmon": _d("6.0"),
        "tuna": _d("6.1"),
        "shrimp": _d("11.8"),
        "eggs": _d("4.2"),
        "tofu": _d("2.0"),
        "beans": _d("0.4"),
        "lentils": _d("0.9"),
        "chickpeas": _d("0.4"),
        # Grains and starches
        "rice": _d("2.7"),
        "wheat": _d("1.4"),
        "bread": _d("1.3"),
        "pasta": _d("1.1"),
        "potatoes": _d("0.3"),
        "oats": _d("1.6"),
        "quinoa": _d("1.8"),
        "corn": _d("1.1"),
        "barley": _d("1.2"),
        # Dairy
        "milk": _d("3.2"),
        "cheese": _d("13.5"),
        "butter": _d("23.8"),
        "yogurt": _d("2.2"),
        "cream": _d("7.4"),
        # Vegetables
        "tomatoes": _d("1.4"),
        "onions": _d("0.3"),
        "carrots": _d("0.4"),
        "broccoli": _d("0.4"),
        "spinach": _d("0.4"),
        "lettuce": _d("0.5"),
        "cabbage": _d("0.3"),
        "peppers": _d("0.7"),
        "cucumber": _d("0.5"),
        "garlic": _d("0.6"),
        "ginger": _d("0.8"),
        # Oils and fats
        "olive oil": _d("6.3"),
        "vegetable oil": _d("6.0"),
        "coconut oil": _d("6.4"),
        "sunflower oil": _d("5.8"),
        "palm oil": _d("7.6"),
        # Spices and others
        "salt": _d("0.04"),
        "sugar": _d("1.8"),
        "black pepper": _d("7.0"),
        "turmeric": _d("3.0"),
        "cumin": _d("4.2"),
        "coriander": _d("3.8"),
        "cinnamon": _d("5.5"),
        "cardamom": _d("8.2"),
        # Nuts and seeds
        "almonds": _d("8.8"),
        "cashews": _d("7.9"),
        "peanuts": _d("2.5"),
        "walnuts": _d("7.2"),
        "sesame seeds": _d("5.9"),
        # Fruits
        "apples": _d("0.4"),
        "bananas": _d("0.7"),
        "oranges": _d("0.4"),
        "lemons": _d("0.6"),
        "coconut": _d("1.7"),
    }
)

CATEGORY_AVERAGES = MappingProxyType(
    {
        "protein": _d("8.5"),
        "grain": _d("1.5"),
        "vegetable": _d("0.5"),
        "dairy": _d("8.0"),
        "oil": _d("6.2"),
        "spice": _d("4.0"),
        "other": _d("2.0"),
    }
)

DEFAULT_CATEGORY = "other"
DEFAULT_CARBON_PER_KG = CATEGORY_AVERAGES[DEFAULT_CATEGORY]

INGREDIENT_CATEGORIES = tuple(CATEGORY_AVERAGES)
