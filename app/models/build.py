"""
Models / build.py
Rôle:
- Définir la forme d'un Build tel qu'échangé avec le backend REST (Pydantic).

Notes:
- Le backend parle camelCase (`_id`, `userId`, `isPublic`...) : on expose des noms
  Python et des alias pour la (dé)sérialisation (`model_dump(by_alias=True)`).
- Les stats sont bornées à [0, 99] à la lecture, les listes d'équipement ne sont
  jamais `None`, les tags sont uniques (ordre conservé).
- `userId` absent => build "preset" (lecture seule).
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.form_utils import coerce_stat, parse_item_list, unique_in_order

STARTING_CLASSES: List[str] = [
    "Vagabond", "Warrior", "Hero", "Bandit", "Astrologer",
    "Prophet", "Samurai", "Prisoner", "Confessor", "Wretch",
]
DEFAULT_CLASS = "Vagabond"

STAT_NAMES: List[str] = [
    "vigor", "mind", "endurance", "strength",
    "dexterity", "intelligence", "faith", "arcane",
]
DEFAULT_STAT = 10

ARMOR_SLOTS: List[str] = ["helmet", "chest", "gauntlets", "legs"]
# Slots édités comme texte "a, b, c"
LIST_SLOTS: List[str] = ["rightHand", "leftHand", "talismans"]


class Stats(BaseModel):
    """Huit attributs, chacun dans [0, 99]."""
    vigor: int = DEFAULT_STAT
    mind: int = DEFAULT_STAT
    endurance: int = DEFAULT_STAT
    strength: int = DEFAULT_STAT
    dexterity: int = DEFAULT_STAT
    intelligence: int = DEFAULT_STAT
    faith: int = DEFAULT_STAT
    arcane: int = DEFAULT_STAT

    model_config = ConfigDict(extra="ignore")

    @field_validator(*STAT_NAMES, mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return coerce_stat(value, allow_blank=False)


class Armor(BaseModel):
    helmet: str = ""
    chest: str = ""
    gauntlets: str = ""
    legs: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator(*ARMOR_SLOTS, mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class Equipment(BaseModel):
    right_hand: List[str] = Field(default_factory=list, alias="rightHand")
    left_hand: List[str] = Field(default_factory=list, alias="leftHand")
    armor: Armor = Field(default_factory=Armor)
    talismans: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("right_hand", "left_hand", "talismans", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> List[str]:
        return parse_item_list(value)

    @field_validator("armor", mode="before")
    @classmethod
    def _armor_default(cls, value: Any) -> Any:
        return value if value is not None else {}


class Build(BaseModel):
    """Build complet (lecture API)."""
    id: Optional[str] = Field(None, alias="_id")
    user_id: Optional[str] = Field(None, alias="userId")
    name: str = ""
    description: str = ""
    character_class: str = Field(DEFAULT_CLASS, alias="class")
    level: int = 1
    stats: Stats = Field(default_factory=Stats)
    equipment: Equipment = Field(default_factory=Equipment)
    spells: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_public: bool = Field(True, alias="isPublic")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("character_class", mode="before")
    @classmethod
    def _class(cls, value: Any) -> str:
        return value or DEFAULT_CLASS

    @field_validator("stats", "equipment", mode="before")
    @classmethod
    def _nested_default(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("spells", mode="before")
    @classmethod
    def _spells(cls, value: Any) -> List[str]:
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
        return not self.user_id


class BuildList(BaseModel):
    """Enveloppe de `GET /api/v1/builds`."""
    builds: List[Build] = Field(default_factory=list)

    @field_validator("builds", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []
