"""Fixed category list used for transactions and the expense breakdown."""

from typing import NamedTuple, Optional


class Category(NamedTuple):
    id: str
    name: str
    icon: str
    color: str


CATEGORIES = [
    Category("food", "Food", "🧁", "#F8E8EE"),
    Category("transport", "Transport", "🌸", "#DCD6F7"),
    Category("housing", "Housing", "🏠", "#A6B1E1"),
    Category("leisure", "Leisure", "🎀", "#FBC7D4"),
    Category("salary", "Salary", "💖", "#E1AFD1"),
    Category("health", "Health", "🌷", "#FFE6E6"),
    Category("education", "Books", "📖", "#E5D1FA"),
    Category("others", "Other", "✨", "#F9F7F7"),
]

OTHER = CATEGORIES[-1]

_BY_ID = {c.id: c for c in CATEGORIES}


def get_category(cat_id: Optional[str]) -> Category:
    """Look up a category, falling back to the 'Other' bucket."""
    return _BY_ID.get(cat_id or "", OTHER)


def category_name(cat_id: Optional[str]) -> str:
    return get_category(cat_id).name


def is_known(cat_id: Optional[str]) -> bool:
    return cat_id in _BY_ID
