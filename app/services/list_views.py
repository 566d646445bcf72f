"""
Service: list_views.py
Rôle :
- Vues "collection" : tous les builds, tous les guides, mes builds.
- Quatre états exclusifs : loading / error / empty / populated
  (+ auth_required pour "mes builds" sans utilisateur).

Propriété :
- Contrôles edit/delete seulement si `owner_id(entité) == utilisateur courant`.
- Entité sans propriétaire => "preset", jamais de contrôles.

Suppression :
- DELETE avec `{userId}` dans le corps, puis retrait local de l'entité.
  En cas d'échec : erreur affichée, liste inchangée (pas de rollback à faire).

Réponses tardives :
- Chaque chargement porte un numéro de génération ; une réponse arrivant après
  `close()` ou après un chargement plus récent est ignorée.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from app.models.build import Build
from app.models.guide import Guide
from .api_client import ApiError, TacticsApiClient
from .auth_session import AuthSession
from .editors import BuildEditor

logger = logging.getLogger(__name__)

T = TypeVar("T", Build, Guide)


class ViewState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    POPULATED = "populated"
    AUTH_REQUIRED = "auth_required"
    LOADED = "loaded"


class _ListView(ABC, Generic[T]):
    title = ""
    path = ""
    kind = ""
    delete_requires = "You must be signed in to delete"

    def __init__(self, api: TacticsApiClient, auth: AuthSession) -> None:
        self.api = api
        self.auth = auth
        self.items: List[T] = []
        self.state = ViewState.LOADING
        self.error: Optional[str] = None
        self.error_status: Optional[int] = None
        self.mounted = True
        self._generation = 0

    # ------------------------------------------------------------------
    # À spécialiser
    # ------------------------------------------------------------------
    @abstractmethod
    def _fetch(self) -> List[T]:
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

    def _is_current(self, generation: int) -> bool:
        return self.mounted and generation == self._generation

    def _settle(self) -> None:
        self.state = ViewState.POPULATED if self.items else ViewState.EMPTY

    def load(self) -> ViewState:
        self._generation += 1
        generation = self._generation
        self.state = ViewState.LOADING
        self.error = None
        self.error_status = None
        try:
            items = self._fetch()
        except ApiError as exc:
            if self._is_current(generation):
                self.error = exc.message
                self.error_status = exc.status_code
                self.state = ViewState.ERROR
            return self.state
        if not self._is_current(generation):
            logger.debug("Dropping stale list response", extra={"view": self.kind})
            return self.state
        self.items = items
        self._settle()
        return self.state

    # ------------------------------------------------------------------
    # Propriété / suppression
    # ------------------------------------------------------------------
    def is_preset(self, entity: T) -> bool:
        return not self.owner_id(entity)

    def can_manage(self, entity: T) -> bool:
        owner = self.owner_id(entity)
        return bool(owner) and owner == self.auth.user_id

    def find(self, entity_id: str) -> Optional[T]:
        return next((item for item in self.items if item.id == entity_id), None)

    def delete(self, entity_id: str) -> bool:
        user = self.auth.user
        if user is None:
            self.error = self.delete_requires
            self.error_status = 401
            return False
        entity = self.find(entity_id)
        if entity is None:
            self.error = f"{self.kind.capitalize()} not found"
            self.error_status = 404
            return False
        if not self.can_manage(entity):
            self.error = f"You can only delete your own {self.kind}s"
            self.error_status = 403
            return False

        try:
            self._delete(entity_id, user.id)
        except ApiError as exc:
            self.error = exc.message
            self.error_status = exc.status_code or 502
            self.state = ViewState.ERROR
            return False

        self.items = [item for item in self.items if item.id != entity_id]
        self.error = None
        self.error_status = None
        self._settle()
        return True

    # ------------------------------------------------------------------
    # Rendu
    # ------------------------------------------------------------------
    def card(self, entity: T) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "preset": self.is_preset(entity),
            "can_manage": self.can_manage(entity),
            "detail_path": f"/{self.kind}s/{entity.id}",
        }

    def page(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "path": self.path,
            "state": self.state.value,
            "error": self.error,
            "items": [self.card(item) for item in self.items],
        }


class _BuildListMixin:
    kind = "build"

    @staticmethod
    def owner_id(entity: Build) -> Optional[str]:
        return entity.user_id

    def _delete(self, entity_id: str, user_id: str) -> None:
        self.api.delete_build(entity_id, user_id)

    def card(self, entity: Build) -> Dict[str, Any]:
        card = super().card(entity)
        card.update(
            name=entity.name,
            description=entity.description,
            character_class=entity.character_class,
            level=entity.level,
            tags=list(entity.tags),
            is_public=entity.is_public,
            created_at=entity.created_at,
        )
        return card


class BuildListView(_BuildListMixin, _ListView[Build]):
    title = "Builds"
    path = "/builds"

    def _fetch(self) -> List[Build]:
        return self.api.list_builds()


class MyBuildsView(_BuildListMixin, _ListView[Build]):
    title = "My Builds"
    path = "/my-builds"

    def load(self) -> ViewState:
        if self.auth.user is None:
            self.items = []
            self.state = ViewState.AUTH_REQUIRED
            return self.state
        return super().load()

    def _fetch(self) -> List[Build]:
        return self.api.list_user_builds(self.auth.user.id)

    def _on_saved(self, _build: Build) -> None:
        self.load()

    def open_editor(self, build_id: Optional[str] = None) -> Optional[BuildEditor]:
        """Éditeur de création (sans id) ou d'édition ; la liste est rechargée après succès."""
        if build_id is None:
            return BuildEditor(self.api, self.auth, on_complete=self._on_saved)
        build = self.find(build_id)
        if build is None:
            self.error = "Build not found"
            self.error_status = 404
            return None
        if not self.can_manage(build):
            self.error = "You can only edit your own builds"
            self.error_status = 403
            return None
        return BuildEditor(self.api, self.auth, build, on_complete=self._on_saved)


class GuideListView(_ListView[Guide]):
    title = "Guides"
    path = "/guides"
    kind = "guide"

    @staticmethod
    def owner_id(entity: Guide) -> Optional[str]:
        return entity.author_id

    def _fetch(self) -> List[Guide]:
        return self.api.list_guides()

    def _delete(self, entity_id: str, user_id: str) -> None:
        self.api.delete_guide(entity_id, user_id)

    def card(self, entity: Guide) -> Dict[str, Any]:
        card = super().card(entity)
        card.update(
            title=entity.title,
            description=entity.description,
            category=entity.category,
            difficulty=entity.difficulty,
            recommended_level=entity.recommended_level,
            tags=list(entity.tags),
            created_at=entity.created_at,
        )
        return card
