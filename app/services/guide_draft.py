"""
Service: guide_draft.py
Rôle :
- Brouillon typé d'un Guide pour l'éditeur (création, édition, ou préremplissage
  depuis un brouillon généré par le backend).
- `GuideDraft.from_entity(existing)` donne une valeur définie à chaque champ.

Notes :
- `recommended_level` garde le texte brut de la case ; le payload envoie un entier,
  ou null si la case est vide ou non numérique.
- Champs requis : titre, description, contenu.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from app.models.guide import DEFAULT_CATEGORY, DEFAULT_DIFFICULTY, Guide
from app.utils.form_utils import add_unique_tag, parse_item_list, remove_tag


def parse_level(raw: Any) -> Optional[int]:
    text = "" if raw is None else str(raw).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


@dataclass
class GuideDraft:
    title: str = ""
    description: str = ""
    content: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY
    recommended_level: str = ""
    associated_builds: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    is_public: bool = True

    @classmethod
    def from_entity(cls, existing: Union[Guide, Mapping[str, Any], None] = None) -> "GuideDraft":
        if existing is None:
            return cls()
        guide = existing if isinstance(existing, Guide) else Guide.model_validate(dict(existing))
        return cls(
            title=guide.title,
            description=guide.description,
            content=guide.content,
            category=guide.category,
            difficulty=guide.difficulty,
            recommended_level="" if guide.recommended_level is None else str(guide.recommended_level),
            associated_builds=list(guide.associated_builds),
            tags=list(guide.tags),
            images=list(guide.images),
            is_public=guide.is_public,
        )

    def set_associated_builds_text(self, text: Any) -> None:
        self.associated_builds = parse_item_list(text)

    def set_images_text(self, text: Any) -> None:
        self.images = parse_item_list(text)

    def add_tag(self, raw: Any) -> bool:
        before = len(self.tags)
        self.tags = add_unique_tag(self.tags, raw)
        return len(self.tags) != before

    def remove_tag(self, tag: str) -> None:
        self.tags = remove_tag(self.tags, tag)

    def validate(self) -> Optional[str]:
        if not self.title.strip():
            return "Guide title is required"
        if not self.description.strip():
            return "Guide description is required"
        if not self.content.strip():
            return "Guide content is required"
        return None

    def to_payload(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title.strip(),
            "description": self.description,
            "content": self.content,
            "category": self.category,
            "difficulty": self.difficulty,
            "recommendedLevel": parse_level(self.recommended_level),
            "associatedBuilds": list(self.associated_builds),
            "tags": list(self.tags),
            "images": list(self.images),
            "isPublic": self.is_public,
        }
        if user_id is not None:
            payload["userId"] = user_id
        return payload

    def form_view(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "category": self.category,
            "difficulty": self.difficulty,
            "recommendedLevel": self.recommended_level,
            "associatedBuilds": list(self.associated_builds),
            "tags": list(self.tags),
            "images": list(self.images),
            "isPublic": self.is_public,
        }
