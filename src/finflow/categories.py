"""Default category registry.

Categories are free-form strings on every record; this registry only supplies
display metadata for the well-known ones.
"""

from pydantic import BaseModel


class Category(BaseModel):
    """Display metadata for a category name."""

    name: str
    icon: str
    color: str


DEFAULT_CATEGORIES: list[Category] = [
    Category(name="Food & Dining", icon="🍽️", color="#FF6B6B"),
    Category(name="Transportation", icon="🚗", color="#4ECDC4"),
    Category(name="Shopping", icon="🛍️", color="#FFD166"),
    Category(name="Entertainment", icon="🎬", color="#06D6A0"),
    Category(name="Bills & Utilities", icon="💡", color="#118AB2"),
    Category(name="Healthcare", icon="🏥", color="#EF476F"),
    Category(name="Education", icon="📚", color="#073B4C"),
    Category(name="Income", icon="💰", color="#2A9D8F"),
    Category(name="Others", icon="📝", color="#6C757D"),
]

FALLBACK_CATEGORY = "Others"

_BY_NAME = {category.name.lower(): category for category in DEFAULT_CATEGORIES}


def lookup(name: str) -> Category:
    """Metadata for a category, falling back to "Others" under the given name."""
    found = _BY_NAME.get(name.strip().lower())
    if found:
        return found
    fallback = _BY_NAME[FALLBACK_CATEGORY.lower()]
    return fallback.model_copy(update={"name": name})
