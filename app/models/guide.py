"""
Models / guide.py
Rôle:
- Définir la forme d'un Guide échangé avec le backend REST (Pydantic).

Champs notables:
- author_id (`authorId`): propriétaire, absent pour les guides "preset".
- recommended_level (`recommendedLevel`): entier optionnel.
- associated_builds (`associatedBuilds`): identifiants de builds liés.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.form_utils import parse_item_list, unique_in_order

GUIDE_CATEGORIES: List[str] = [
    "Boss Guide",
    "Build Guide",
    "Area Guide",
    "Weapon Guide",
    "Strategy Guide",
]
DEFAULT_CATEGORY = "Boss Guide"

GUIDE_DIFFICULTIES: List[str] = ["Easy", "Medium", "Hard"]
DEFAULT_DIFFICULTY = "Easy"

DIFFICULTY_COLORS: Dict[str, str] = {
    "easy": "#10b981",
    "medium": "#f59e0b",
    "hard": "#ef4444",
}
CATEGORY_COLORS: Dict[str, str] = {
    "boss guide": "#dc2626",
    "build guide": "#7c3aed",
    "area guide": "#059669",
    "weapon guide": "#d97706",
    "strategy guide": "#2563eb",
}
FALLBACK_COLOR = "#6b7280"


def difficulty_color(difficulty: Optional[str]) -> str:
    return DIFFICULTY_COLORS.get((difficulty or "").lower(), FALLBACK_COLOR)


def category_color(category: Optional[str]) -> str:
    return CATEGORY_COLORS.get((category or "").lower(), FALLBACK_COLOR)


class Guide(BaseModel):
    """Guide complet (lecture API)."""
    id: Optional[str] = Field(None, alias="_id")
    author_id: Optional[str] = Field(None, alias="authorId")
    title: str = ""
    description: str = ""
    content: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY
    recommended_level: Optional[int] = Field(None, alias="recommendedLevel")
    associated_builds: List[str] = Field(default_factory=list, alias="associatedBuilds")
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    is_public: bool = Field(True, alias="isPublic")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("title", "description", "content", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        return value or DEFAULT_CATEGORY

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value: Any) -> str:
        return value or DEFAULT_DIFFICULTY

    @field_validator("recommended_level", mode="before")
    @classmethod
    def _level(cls, value: Any) -> Optional[int]:
        if value is None or str(value).strip() == "":
            return None
        try:
            return int(float(str(value).strip()))
        except (ValueError, OverflowError):
            return None

    @field_validator("associated_builds", "images", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> List[str]:
        return parse_item_list(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return unique_in_order(parse_item_list(value))

    @field_validator("is_public", mode="before")
    @classmethod
    def _public(cls, value: Any) -> bool:
        return True if value is None else value

    @property
    def is_preset(self) -> bool:
        return not self.author_id


class GuideList(BaseModel):
    """Enveloppe de `GET /api/v1/guides`."""
    guides: List[Guide] = Field(default_factory=list)

    @field_validator("guides", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []
