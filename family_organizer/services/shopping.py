"""Shopping item helpers"""

from typing import Dict, Tuple

from ..models.organizer import ShoppingCategory

# Checked in order; the first category with a keyword contained in the name wins
CATEGORY_KEYWORDS: Dict[ShoppingCategory, Tuple[str, ...]] = {
    ShoppingCategory.DAIRY: ("milk", "cheese", "yogurt", "butter"),
    ShoppingCategory.BAKERY: ("bread", "bagel", "croissant"),
    ShoppingCategory.PRODUCE: ("apple", "banana", "lettuce", "tomato"),
    ShoppingCategory.MEAT: ("chicken", "beef", "pork", "turkey"),
    ShoppingCategory.FISH: ("salmon", "tuna", "fish"),
    ShoppingCategory.FROZEN: ("frozen", "ice cream"),
    ShoppingCategory.HOUSEHOLD: ("soap", "detergent", "paper towel"),
    ShoppingCategory.PERSONAL_CARE: ("shampoo", "toothpaste", "deodorant"),
}


def normalize_name(name: str) -> str:
    return name.strip().lower()


def categorize(name: str) -> ShoppingCategory:
    """Guess a category from keywords in the item name"""
    normalized = normalize_name(name)
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in normalized for keyword in keywords):
            return category
    return ShoppingCategory.OTHER
