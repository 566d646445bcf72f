"""
Service: detail_views.py
Rôle :
- Pages de détail d'un Build / d'un Guide, chargées par identifiant de chemin.
- Bascule inline vers l'éditeur correspondant (mode édition) et retour ; après une
  mise à jour réussie, l'entité est rechargée.
- Le détail d'un build peut demander au backend un brouillon de guide et ouvre un
  GuideEditor prérempli en mode création (rien n'est persisté avant la soumission).

États :
- loading -> loaded | error. Une erreur de chargement (404 compris) donne l'état
  "not found" avec un lien retour vers la collection, jamais une page vide.
- Les échecs d'actions (suppression, génération, rechargement après édition)
  vont dans `action_error` et gardent l'entité affichée.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from app.models.build import Build
from app.models.guide import Guide, category_color, difficulty_color
from .api_client import ApiError, TacticsApiClient
from .auth_session import AuthSession
from .editors import BuildEditor, GuideEditor
from .list_views import ViewState

logger = logging.getLogger(__name__)

T = TypeVar("T", Build, Guide)


class _DetailView(ABC, Generic[T]):
    kind = ""
    collection_path = ""
    editor_cls: Any = None

    def __init__(self, api: TacticsApiClient, auth: AuthSession, entity_id: str) -> None:
        self.api = api
        self.auth = auth
        self.entity_id = entity_id
        self.entity: Optional[T] = None
        self.state = ViewState.LOADING
        self.error: Optional[str] = None
        self.error_status: Optional[int] = None
        self.action_error: Optional[str] = None
        self.action_status: Optional[int] = None
        self.editor = None
        self.redirect: Optional[str] = None
        self.mounted = True
        self._generation = 0

    @abstractmethod
    def _fetch(self, entity_id: str) -> T:
        ...

    @abstractmethod
    def _delete(self, entity_id: str, user_id: str) -> None:
        ...

    @staticmethod
    @abstractmethod
    def owner_id(entity: T) -> Optional[str]:
        ...

    # ------------------------------------------------------------------
    # Chargement
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.mounted = False

    def load(self, entity_id: Optional[str] = None) -> ViewState:
        """Charge (ou recharge) l'entité ; un nouvel id invalide les réponses en vol."""
        if entity_id is not None and entity_id != self.entity_id:
            self.entity_id = entity_id
            self.entity = None
            self.editor = None
        self._generation += 1
        generation = self._generation
        requested = self.entity_id
        self.state = ViewState.LOADING
        self.error = None
        self.error_status = None
        try:
            entity = self._fetch(requested)
        except ApiError as exc:
            if self.mounted and generation == self._generation:
                self.error = exc.message
                self.error_status = exc.status_code
                self.state = ViewState.ERROR
            return self.state
        if not (self.mounted and generation == self._generation):
            logger.debug("Dropping stale detail response", extra={"view": self.kind, "entity_id": requested})
            return self.state
        self.entity = entity
        self.state = ViewState.LOADED
        return self.state

    # ------------------------------------------------------------------
    # Propriété
    # ------------------------------------------------------------------
    def is_owner(self) -> bool:
        if self.entity is None or self.auth.user is None:
            return False
        owner = self.owner_id(self.entity)
        return bool(owner) and owner == self.auth.user.id

    def badge(self) -> Dict[str, str]:
        label = self.kind.capitalize()
        if self.entity is None or not self.owner_id(self.entity):
            return {"label": f"Preset {label}", "kind": "preset"}
        return {"label": f"User {label}", "kind": "user"}

    def _action_fail(self, message: str, status: int) -> None:
        self.action_error = message
        self.action_status = status

    # ------------------------------------------------------------------
    # Édition inline
    # ------------------------------------------------------------------
    def begin_edit(self):
        if self.entity is None:
            self._action_fail(f"{self.kind.capitalize()} not loaded", 409)
            return None
        if not self.is_owner():
            self._action_fail(f"You can only edit your own {self.kind}s", 403)
            return None
        self.editor = self.editor_cls(self.api, self.auth, self.entity, on_complete=self._on_updated)
        return self.editor

    def cancel_edit(self) -> None:
        self.editor = None

    def _on_updated(self, entity: T) -> None:
        """La mise à jour est enregistrée : un échec du rechargement reste une erreur d'action."""
        self.editor = None
        if self.load() is not ViewState.ERROR:
            return
        logger.warning("Reload after update failed", extra={"view": self.kind, "entity_id": self.entity_id})
        self._action_fail(self.error or f"Failed to reload {self.kind}", self.error_status or 502)
        self.entity = entity
        self.state = ViewState.LOADED
        self.error = None
        self.error_status = None

    def delete(self) -> bool:
        user = self.auth.user
        if user is None or self.entity is None:
            self._action_fail("You must be signed in to delete", 401)
            return False
        if not self.is_owner():
            self._action_fail(f"You can only delete your own {self.kind}s", 403)
            return False
        try:
            self._delete(self.entity_id, user.id)
        except ApiError as exc:
            self._action_fail(exc.message, exc.status_code or 502)
            return False
        self.action_error = None
        self.redirect = self.collection_path
        return True

    # ------------------------------------------------------------------
    # Rendu
    # ------------------------------------------------------------------
    def _entity_view(self) -> Dict[str, Any]:
        return self.entity.model_dump(by_alias=True) if self.entity is not None else {}

    def page(self) -> Dict[str, Any]:
        page: Dict[str, Any] = {
            "state": self.state.value,
            "entity_id": self.entity_id,
            "back_link": self.collection_path,
            "redirect": self.redirect,
            "action_error": self.action_error,
        }
        if self.state is ViewState.ERROR:
            page["title"] = f"{self.kind.capitalize()} Not Found"
            page["error"] = self.error
            return page
        if self.entity is not None:
            page[self.kind] = self._entity_view()
            page["badge"] = self.badge()
            page["can_manage"] = self.is_owner()
        if self.editor is not None:
            page["editor"] = self.editor.form_view()
        return page


class BuildDetailView(_DetailView[Build]):
    kind = "build"
    collection_path = "/builds"
    editor_cls = BuildEditor

    def __init__(self, api: TacticsApiClient, auth: AuthSession, entity_id: str) -> None:
        super().__init__(api, auth, entity_id)
        self.guide_editor: Optional[GuideEditor] = None
        self.generating = False

    @staticmethod
    def owner_id(entity: Build) -> Optional[str]:
        return entity.user_id

    def _fetch(self, entity_id: str) -> Build:
        return self.api.get_build(entity_id)

    def _delete(self, entity_id: str, user_id: str) -> None:
        self.api.delete_build(entity_id, user_id)

    def generate_guide(self) -> Optional[GuideEditor]:
        user = self.auth.user
        if user is None:
            self._action_fail("You must be signed in to generate guides", 401)
            return None
        if self.entity is None:
            self._action_fail("Build not loaded", 409)
            return None
        self.generating = True
        self.action_error = None
        try:
            draft = self.api.generate_guide(self.entity_id, user.id)
        except ApiError as exc:
            self._action_fail(exc.message, exc.status_code or 502)
            return None
        finally:
            self.generating = False
        self.guide_editor = GuideEditor(
            self.api, self.auth, initial=draft, on_complete=self._on_guide_saved
        )
        return self.guide_editor

    def cancel_guide(self) -> None:
        self.guide_editor = None

    def _on_guide_saved(self, guide: Guide) -> None:
        self.guide_editor = None
        if guide.id:
            self.redirect = f"/guides/{guide.id}"

    def page(self) -> Dict[str, Any]:
        page = super().page()
        page["generating"] = self.generating
        if self.guide_editor is not None:
            page["guide_editor"] = self.guide_editor.form_view()
        return page


class GuideDetailView(_DetailView[Guide]):
    kind = "guide"
    collection_path = "/guides"
    editor_cls = GuideEditor

    @staticmethod
    def owner_id(entity: Guide) -> Optional[str]:
        return entity.author_id

    def _fetch(self, entity_id: str) -> Guide:
        return self.api.get_guide(entity_id)

    def _delete(self, entity_id: str, user_id: str) -> None:
        self.api.delete_guide(entity_id, user_id)

    def _entity_view(self) -> Dict[str, Any]:
        view = super()._entity_view()
        view["difficultyColor"] = difficulty_color(self.entity.difficulty)
        view["categoryColor"] = category_color(self.entity.category)
        return view
