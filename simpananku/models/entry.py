"""
Note entry models and the client-side list filter
"""

from enum import Enum
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel


class TextCategory(str, Enum):
    LINK = "link"
    USERNAME = "username"
    PASSWORD = "password"
    NUMBER = "number"
    PHONE = "phone"
    TEXT = "text"
    NOTE = "note"
    GATAU = "gatau"


# Filter values besides the categories themselves
ALL_CATEGORIES = "all"
FAVORITES = "favorites"

FILTER_OPTIONS = [ALL_CATEGORIES, FAVORITES] + [category.value for category in TextCategory]


# Each category gets its own badge colors
CATEGORY_CONFIG: Dict[TextCategory, Dict[str, str]] = {
    TextCategory.LINK: {"icon": "🔗", "label": "Link", "color": "#2563EB", "bg": "#DBEAFE"},
    TextCategory.USERNAME: {"icon": "👤", "label": "Username", "color": "#7C3AED", "bg": "#EDE9FE"},
    TextCategory.PASSWORD: {"icon": "🔐", "label": "Password", "color": "#DC2626", "bg": "#FEE2E2"},
    TextCategory.NUMBER: {"icon": "🔢", "label": "Number", "color": "#059669", "bg": "#D1FAE5"},
    TextCategory.PHONE: {"icon": "📱", "label": "Phone", "color": "#EA580C", "bg": "#FFEDD5"},
    TextCategory.TEXT: {"icon": "📝", "label": "Text", "color": "#4B5563", "bg": "#F3F4F6"},
    TextCategory.NOTE: {"icon": "📋", "label": "Note", "color": "#CA8A04", "bg": "#FEF9C3"},
    TextCategory.GATAU: {"icon": "🤷", "label": "Gatau", "color": "#EC4899", "bg": "#FCE7F3"},
}


class TextEntry(BaseModel):
    """A row of the entries table"""
    id: str
    user_id: str
    title: str
    content: str
    category: TextCategory
    is_favorite: bool = False
    created_at: datetime
    updated_at: datetime


class CreateTextEntry(BaseModel):
    """Fields the user edits on the add/edit screen"""
    title: str
    content: str
    category: TextCategory = TextCategory.TEXT
    is_favorite: bool = False


def matches(entry: TextEntry, query: str = "",
            category: Optional[Union[TextCategory, str]] = None) -> bool:
    """Case-insensitive search over title and content plus an optional category filter."""
    needle = (query or "").lower()
    matches_search = needle in entry.title.lower() or needle in entry.content.lower()

    if category is None or category == ALL_CATEGORIES:
        return matches_search
    if category == FAVORITES:
        return matches_search and entry.is_favorite
    return matches_search and entry.category == TextCategory(category)


def filter_entries(entries: Iterable[TextEntry], query: str = "",
                   category: Optional[Union[TextCategory, str]] = None) -> List[TextEntry]:
    """Filter an already-fetched list, keeping its order"""
    return [entry for entry in entries if matches(entry, query, category)]
