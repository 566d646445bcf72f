"""
Service: build_draft.py
Rôle :
- Brouillon typé d'un Build pour l'éditeur (création ET édition).
- `BuildDraft.from_entity(existing)` remplit CHAQUE champ avec une valeur définie :
  aucun état partiel, aucun `None` dans les listes d'équipement.

Règles de saisie :
- Stats : "" accepté transitoirement (case vidée), sinon borné à [0, 99],
  saisie non numérique => 0.
- Mains droite/gauche et talismans : texte "a, b, c" re-parsé à chaque changement
  (trim, entrées vides supprimées, ordre et doublons conservés).
- Armure : quatre slots texte libres.
- Tags : ajout seulement si non vide après trim et absent ; retrait par égalité exacte.

Niveau dérivé :
- 1 + somme des huit stats ("" compte pour 0), plancher à 1. Pas de base soustraite.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from app.models.build import (
    ARMOR_SLOTS,
    DEFAULT_CLASS,
    DEFAULT_STAT,
    LIST_SLOTS,
    STAT_NAMES,
    Build,
)
from app.utils.form_utils import (
    StatValue,
    add_unique_tag,
    coerce_stat,
    join_item_list,
    parse_item_list,
    remove_tag,
    stat_as_int,
)

BASE_LEVEL = 1


def default_stats() -> Dict[str, StatValue]:
    return {name: DEFAULT_STAT for name in STAT_NAMES}


def default_armor() -> Dict[str, str]:
    return {slot: "" for slot in ARMOR_SLOTS}


def derive_level(stats: Mapping[str, StatValue]) -> int:
    total = sum(stat_as_int(stats.get(name, 0)) for name in STAT_NAMES)
    return max(BASE_LEVEL, BASE_LEVEL + total)


@dataclass
class BuildDraft:
    name: str = ""
    description: str = ""
    character_class: str = DEFAULT_CLASS
    stats: Dict[str, StatValue] = field(default_factory=default_stats)
    right_hand: List[str] = field(default_factory=list)
    left_hand: List[str] = field(default_factory=list)
    armor: Dict[str, str] = field(default_factory=default_armor)
    talismans: List[str] = field(default_factory=list)
    spells: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    is_public: bool = True

    @classmethod
    def from_entity(cls, existing: Union[Build, Mapping[str, Any], None] = None) -> "BuildDraft":
        if existing is None:
            return cls()
        build = existing if isinstance(existing, Build) else Build.model_validate(dict(existing))
        equipment = build.equipment
        return cls(
            name=build.name,
            description=build.description,
            character_class=build.character_class,
            stats={name: getattr(build.stats, name) for name in STAT_NAMES},
            right_hand=list(equipment.right_hand),
            left_hand=list(equipment.left_hand),
            armor={slot: getattr(equipment.armor, slot) for slot in ARMOR_SLOTS},
            talismans=list(equipment.talismans),
            spells=list(build.spells),
            tags=list(build.tags),
            is_public=build.is_public,
        )

    # ------------------------------------------------------------------
    # Saisie
    # ------------------------------------------------------------------
    def set_stat(self, stat: str, raw: Any) -> StatValue:
        if stat not in STAT_NAMES:
            raise ValueError(f"Unknown stat: {stat}")
        value = coerce_stat(raw)
        self.stats[stat] = value
        return value

    def _list_attr(self, slot: str) -> str:
        if slot not in LIST_SLOTS:
            raise ValueError(f"Unknown equipment list: {slot}")
        return {"rightHand": "right_hand", "leftHand": "left_hand", "talismans": "talismans"}[slot]

    def set_equipment_text(self, slot: str, text: Any) -> List[str]:
        items = parse_item_list(text)
        setattr(self, self._list_attr(slot), items)
        return items

    def equipment_text(self, slot: str) -> str:
        return join_item_list(getattr(self, self._list_attr(slot)))

    def set_armor(self, slot: str, value: Any) -> None:
        if slot not in ARMOR_SLOTS:
            raise ValueError(f"Unknown armor slot: {slot}")
        self.armor[slot] = "" if value is None else str(value)

    def set_spells_text(self, text: Any) -> None:
        self.spells = parse_item_list(text)

    def add_tag(self, raw: Any) -> bool:
        before = len(self.tags)
        self.tags = add_unique_tag(self.tags, raw)
        return len(self.tags) != before

    def remove_tag(self, tag: str) -> None:
        self.tags = remove_tag(self.tags, tag)

    # ------------------------------------------------------------------
    # Dérivés / soumission
    # ------------------------------------------------------------------
    @property
    def level(self) -> int:
        return derive_level(self.stats)

    def validate(self) -> Optional[str]:
        if not self.name.strip():
            return "Build name is required"
        return None

    def to_payload(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "description": self.description,
            "class": self.character_class,
            "level": self.level,
            "stats": {name: stat_as_int(self.stats.get(name, 0)) for name in STAT_NAMES},
            "equipment": {
                "rightHand": list(self.right_hand),
                "leftHand": list(self.left_hand),
                "armor": dict(self.armor),
                "talismans": list(self.talismans),
            },
            "spells": list(self.spells),
            "tags": list(self.tags),
            "isPublic": self.is_public,
        }
        if user_id is not None:
            payload["userId"] = user_id
        return payload

    def form_view(self) -> Dict[str, Any]:
        """État affichable du formulaire (listes réaffichées en texte)."""
        return {
            "name": self.name,
            "description": self.description,
            "class": self.character_class,
            "stats": dict(self.stats),
            "rightHand": self.equipment_text("rightHand"),
            "leftHand": self.equipment_text("leftHand"),
            "armor": dict(self.armor),
            "talismans": self.equipment_text("talismans"),
            "spells": join_item_list(self.spells),
            "tags": list(self.tags),
            "isPublic": self.is_public,
            "level": self.level,
        }
