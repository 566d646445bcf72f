"""
Service: auth_session.py
Rôle :
- Détenteur de la session d'identité : utilisateur courant, drapeaux `loading` /
  `is_initialized`, `sign_in()`, `sign_out()`, `is_authenticated`.
- Une seule instance, créée à la racine de l'app et injectée via les dépendances
  FastAPI (voir `app/deps/session.py`).

Cycle de vie :
1) Construction : restaure l'utilisateur sauvegardé dans le stockage local.
2) `initialize()` (au démarrage, hors boucle) : initialise le fournisseur d'identité.
   Un échec est journalisé puis ignoré : l'UI garde le bouton de connexion manuel.
3) `handle_credential_response()` : décode le jeton (SANS vérification de
   signature, le backend reste juge), persiste l'utilisateur puis prévient le
   backend en best-effort.
4) `sign_out()` : efface l'utilisateur en mémoire et dans le stockage local.
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, Optional

import jwt
from pydantic import ValidationError

from app.config.settings import settings
from app.models.user import SessionUser
from .api_client import ApiError, TacticsApiClient
from .identity_provider import (
    CredentialResponse,
    IdentityProvider,
    IdentityProviderError,
    ProviderConfig,
)
from .local_storage import LocalStorage

logger = logging.getLogger(__name__)


def decode_id_token(token: str) -> Dict[str, Any]:
    """Charge utile du JWT, sans vérifier la signature."""
    return jwt.decode(token, options={"verify_signature": False})


class AuthSession:
    def __init__(
        self,
        provider: IdentityProvider,
        storage: LocalStorage,
        api: TacticsApiClient,
        *,
        client_id: Optional[str] = None,
        storage_key: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.storage = storage
        self.api = api
        self.client_id = settings.GOOGLE_CLIENT_ID if client_id is None else client_id
        self.storage_key = storage_key or settings.SESSION_USER_KEY
        self._lock = RLock()

        self.user: Optional[SessionUser] = None
        self.loading = True
        self.is_initialized = False
        self._restore()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    # ------------------------------------------------------------------
    # Démarrage
    # ------------------------------------------------------------------
    def _restore(self) -> None:
        raw = self.storage.get_item(self.storage_key)
        if not raw:
            return
        try:
            self.user = SessionUser.model_validate_json(raw)
        except ValidationError:
            logger.error("Error loading saved user", exc_info=True)
            self.storage.remove_item(self.storage_key)

    def provider_config(self) -> ProviderConfig:
        """Options passées au fournisseur (et exposées au navigateur par /auth/config)."""
        return ProviderConfig(client_id=self.client_id, callback=self.handle_credential_response)

    def initialize(self) -> None:
        config = self.provider_config()
        try:
            self.provider.initialize(config)
        except IdentityProviderError:
            logger.error("Error initializing Google Auth", exc_info=True)
        finally:
            with self._lock:
                self.is_initialized = True
                self.loading = False

    # ------------------------------------------------------------------
    # Connexion / déconnexion
    # ------------------------------------------------------------------
    def sign_in(self) -> None:
        try:
            self.provider.prompt()
        except IdentityProviderError:
            logger.error("Sign-in prompt unavailable", exc_info=True)

    def sign_out(self) -> None:
        with self._lock:
            try:
                self.provider.disable_auto_select()
            except Exception:
                logger.error("Error signing out", exc_info=True)
                raise
            self.user = None
            self.storage.remove_item(self.storage_key)

    def handle_credential_response(self, response: CredentialResponse) -> Optional[SessionUser]:
        """Callback du fournisseur. Renvoie l'utilisateur créé, ou None si le jeton est inexploitable."""
        try:
            payload = decode_id_token(response.credential)
            user = SessionUser(
                id=str(payload["sub"]),
                name=payload.get("name") or "",
                email=payload.get("email") or "",
                picture=payload.get("picture") or "",
                token=response.credential,
            )
        except (jwt.PyJWTError, KeyError, ValidationError):
            logger.error("Error handling credential response", exc_info=True)
            return None

        with self._lock:
            self.user = user
            self.storage.set_item(self.storage_key, user.model_dump_json())

        self._register_backend_user(user)
        return user

    def _register_backend_user(self, user: SessionUser) -> None:
        try:
            self.api.register_google_user(user.id, user.name, user.email, user.picture)
        except ApiError:
            logger.warning(
                "Backend user registration failed, but continuing with frontend auth",
                exc_info=True,
            )

    def snapshot(self) -> Dict[str, Any]:
        return {
            "user": self.user.public_view() if self.user else None,
            "loading": self.loading,
            "is_initialized": self.is_initialized,
            "is_authenticated": self.is_authenticated,
        }
