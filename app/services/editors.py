"""
Service: editors.py
Rôle :
- Éditeurs de Build et de Guide : un seul formulaire pour "créer" et "modifier".
  Le mode est fixé à la construction : entité existante fournie => édition (PUT),
  sinon création (POST), éventuellement préremplie (`initial`, ex: brouillon généré).

Soumission :
1) pas d'utilisateur de session => `error` = "You must be signed in ...", aucun appel réseau ;
2) validation du brouillon (champs requis) => `error`, aucun appel réseau ;
3) POST/PUT avec `userId` = utilisateur courant ;
4) succès => callback `on_complete(résultat)`, puis remise à zéro en mode création ;
5) échec HTTP/réseau => `error` = champ `error` du corps (ou message générique).

Les éditeurs ne lèvent pas pour ces cas : l'appelant lit `error` / `error_status`.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar, Union

from app.models.build import STARTING_CLASSES, Build
from app.models.guide import GUIDE_CATEGORIES, GUIDE_DIFFICULTIES, Guide
from .api_client import ApiError, TacticsApiClient
from .auth_session import AuthSession
from .build_draft import BuildDraft
from .guide_draft import GuideDraft

logger = logging.getLogger(__name__)

DraftT = TypeVar("DraftT", BuildDraft, GuideDraft)
EntityT = TypeVar("EntityT", Build, Guide)

STATUS_SIGNED_OUT = 401
STATUS_INVALID = 400
STATUS_UPSTREAM = 502


class _Editor(ABC, Generic[DraftT, EntityT]):
    draft_cls: Any = None
    entity_cls: Any = None
    signed_out_message = ""
    text_fields: tuple = ()

    def __init__(
        self,
        api: TacticsApiClient,
        auth: AuthSession,
        existing: Union[EntityT, Mapping[str, Any], None] = None,
        *,
        initial: Union[EntityT, Mapping[str, Any], None] = None,
        on_complete: Optional[Callable[[EntityT], Any]] = None,
    ) -> None:
        self.api = api
        self.auth = auth
        self.on_complete = on_complete
        self.existing: Optional[EntityT] = None
        if existing is not None:
            self.existing = (
                existing if isinstance(existing, self.entity_cls)
                else self.entity_cls.model_validate(dict(existing))
            )
            if not self.existing.id:
                raise ValueError("Cannot edit an entity without an identifier")
        self.draft: DraftT = self.draft_cls.from_entity(self.existing or initial)
        self.tag_input = ""
        self.loading = False
        self.error: Optional[str] = None
        self.error_status: Optional[int] = None

    @property
    def is_editing(self) -> bool:
        return self.existing is not None

    # ------------------------------------------------------------------
    # Saisie commune
    # ------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> None:
        if name == "is_public":
            self.draft.is_public = bool(value)
            return
        if name not in self.text_fields:
            raise ValueError(f"Unknown field: {name}")
        setattr(self.draft, name, "" if value is None else str(value))

    def add_tag(self, raw: Optional[str] = None) -> bool:
        added = self.draft.add_tag(self.tag_input if raw is None else raw)
        if added:
            self.tag_input = ""
        return added

    def remove_tag(self, tag: str) -> None:
        self.draft.remove_tag(tag)

    def replace_tags(self, tags: Any) -> None:
        self.draft.tags = []
        for tag in tags or []:
            self.draft.add_tag(tag)

    def _choose(self, name: str, value: Any, allowed: list) -> None:
        if value not in allowed:
            raise ValueError(f"Invalid {name}: {value}")
        setattr(self.draft, name, value)

    # ------------------------------------------------------------------
    # Soumission
    # ------------------------------------------------------------------
    def _fail(self, message: str, status: int) -> None:
        self.error = message
        self.error_status = status

    @abstractmethod
    def _send(self, payload: Dict[str, Any]) -> EntityT:
        ...

    def reset(self) -> None:
        self.draft = self.draft_cls()
        self.tag_input = ""

    def submit(self) -> Optional[EntityT]:
        user = self.auth.user
        if user is None:
            self._fail(self.signed_out_message, STATUS_SIGNED_OUT)
            return None

        problem = self.draft.validate()
        if problem:
            self._fail(problem, STATUS_INVALID)
            return None

        self.loading = True
        self.error = None
        self.error_status = None
        try:
            result = self._send(self.draft.to_payload(user_id=user.id))
        except ApiError as exc:
            logger.warning(
                "Editor submit failed",
                extra={"editor": type(self).__name__, "editing": self.is_editing, "api_error": exc.message},
            )
            self._fail(exc.message, exc.status_code or STATUS_UPSTREAM)
            return None
        finally:
            self.loading = False

        if self.on_complete is not None:
            self.on_complete(result)
        if not self.is_editing:
            self.reset()
        return result

    def form_view(self) -> Dict[str, Any]:
        return {
            "mode": "edit" if self.is_editing else "create",
            "entity_id": self.existing.id if self.existing else None,
            "form": self.draft.form_view(),
            "tag_input": self.tag_input,
            "loading": self.loading,
            "error": self.error,
        }


class BuildEditor(_Editor[BuildDraft, Build]):
    draft_cls = BuildDraft
    entity_cls = Build
    signed_out_message = "You must be signed in to create builds"
    text_fields = ("name", "description")

    def set_class(self, value: str) -> None:
        self._choose("character_class", value, STARTING_CLASSES)

    def set_stat(self, stat: str, raw: Any):
        return self.draft.set_stat(stat, raw)

    def set_equipment_text(self, slot: str, text: Any):
        return self.draft.set_equipment_text(slot, text)

    def set_armor(self, slot: str, value: Any) -> None:
        self.draft.set_armor(slot, value)

    @property
    def level(self) -> int:
        return self.draft.level

    def apply_form(self, form: Mapping[str, Any]) -> None:
        """Applique un formulaire (clés camelCase, champs absents inchangés)."""
        for name in self.text_fields:
            if name in form:
                self.set_field(name, form[name])
        if "class" in form:
            self.set_class(form["class"])
        for stat, raw in (form.get("stats") or {}).items():
            self.set_stat(stat, raw)
        for slot in ("rightHand", "leftHand", "talismans"):
            if slot in form:
                self.set_equipment_text(slot, form[slot])
        for slot, value in (form.get("armor") or {}).items():
            self.set_armor(slot, value)
        if "spells" in form:
            self.draft.set_spells_text(form["spells"])
        if "tags" in form:
            self.replace_tags(form["tags"])
        if "isPublic" in form:
            self.set_field("is_public", form["isPublic"])

    def _send(self, payload: Dict[str, Any]) -> Build:
        if self.existing is not None:
            return self.api.update_build(self.existing.id, payload)
        return self.api.create_build(payload)


class GuideEditor(_Editor[GuideDraft, Guide]):
    draft_cls = GuideDraft
    entity_cls = Guide
    signed_out_message = "You must be signed in to save guides"
    text_fields = ("title", "description", "content", "recommended_level")

    def set_category(self, value: str) -> None:
        self._choose("category", value, GUIDE_CATEGORIES)

    def set_difficulty(self, value: str) -> None:
        self._choose("difficulty", value, GUIDE_DIFFICULTIES)

    def apply_form(self, form: Mapping[str, Any]) -> None:
        for name in ("title", "description", "content"):
            if name in form:
                self.set_field(name, form[name])
        if "recommendedLevel" in form:
            self.set_field("recommended_level", form["recommendedLevel"])
        if "category" in form:
            self.set_category(form["category"])
        if "difficulty" in form:
            self.set_difficulty(form["difficulty"])
        if "associatedBuilds" in form:
            self.draft.set_associated_builds_text(form["associatedBuilds"])
        if "images" in form:
            self.draft.set_images_text(form["images"])
        if "tags" in form:
            self.replace_tags(form["tags"])
        if "isPublic" in form:
            self.set_field("is_public", form["isPublic"])

    def _send(self, payload: Dict[str, Any]) -> Guide:
        if self.existing is not None:
            return self.api.update_guide(self.existing.id, payload)
        return self.api.create_guide(payload)
