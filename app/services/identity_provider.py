"""
Service: identity_provider.py
Rôle :
- Définir la capacité "fournisseur d'identité" dont dépend la session :
  initialize(config), prompt(), disable_auto_select().
- Fournir l'adaptateur Google Identity Services (GIS).

Notes :
- Côté navigateur, GIS charge un script puis appelle un callback avec un jeton.
  Ici l'adaptateur vérifie que la bibliothèque cliente est joignable et que le
  client_id est configuré ; le jeton arrive ensuite via POST /auth/callback.
- Toute erreur du fournisseur est remontée en `IdentityProviderError`.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import requests

from app.config.settings import settings

logger = logging.getLogger(__name__)


class IdentityProviderError(RuntimeError):
    """Échec d'initialisation ou d'appel du fournisseur d'identité."""


@dataclass(frozen=True)
class CredentialResponse:
    """Ce que le fournisseur remet au callback : un jeton d'identité (JWT)."""
    credential: str
    select_by: str = ""


@dataclass(frozen=True)
class ProviderConfig:
    client_id: str
    callback: Callable[[CredentialResponse], Any]
    auto_select: bool = False
    cancel_on_tap_outside: bool = True


class IdentityProvider(ABC):
    @abstractmethod
    def initialize(self, config: ProviderConfig) -> None:
        ...

    @abstractmethod
    def prompt(self) -> None:
        ...

    @abstractmethod
    def disable_auto_select(self) -> None:
        ...


class GoogleIdentityProvider(IdentityProvider):
    """Adaptateur autour de Google Identity Services."""

    def __init__(
        self,
        client_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (5.0, 10.0),
    ) -> None:
        self.client_url = client_url or settings.GSI_CLIENT_URL
        self.session = session or requests.Session()
        self.timeout = timeout
        self.config: Optional[ProviderConfig] = None
        self.prompt_pending = False
        self.auto_select = False

    @property
    def loaded(self) -> bool:
        return self.config is not None

    def initialize(self, config: ProviderConfig) -> None:
        if not (config.client_id or "").strip():
            raise IdentityProviderError("Missing Google client id")
        try:
            response = self.session.get(self.client_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise IdentityProviderError("Unable to load Google Identity Services") from exc
        self.config = config
        self.auto_select = config.auto_select
        logger.info("Google Identity Services ready", extra={"gsi_client_id": config.client_id})

    def prompt(self) -> None:
        if not self.loaded:
            raise IdentityProviderError("Google Identity Services not loaded")
        self.prompt_pending = True

    def disable_auto_select(self) -> None:
        self.auto_select = False
        self.prompt_pending = False
