"""
Service: api_client.py
- Centralise les appels vers le backend REST Tarnished Tactics (builds, guides, auth).
- Un seul essai par appel : aucun adaptateur de retry n'est monté sur la session.

Contrat d'erreur:
- Toute réponse non-2xx ou tout échec de transport lève `ApiError`.
- Le message vient du champ `error` du corps JSON s'il existe, sinon d'un message
  générique fourni par l'appelant ("Failed to create build", ...).
- Une réponse 2xx de forme inattendue (corps null, champ mal typé) lève aussi
  `ApiError`, avec le message générique et le statut HTTP reçu.

Endpoints (préfixe /api/v1):
- builds: GET /builds, GET /builds/:id, GET /builds/user/:userId, POST, PUT, DELETE,
  POST /builds/:id/generate-guide
- guides: GET /guides, GET /guides/:id, POST, PUT, DELETE
- auth:   POST /auth/google (best-effort, appelé par la session)
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

import requests
from pydantic import ValidationError

from app.config.settings import settings
from app.models.build import Build, BuildList
from app.models.guide import Guide, GuideList

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class ApiError(RuntimeError):
    """Échec d'un appel au backend (HTTP non-2xx ou erreur réseau)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


def _error_message(response: requests.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            return error
    return fallback


# Parseurs de réponses : toute forme inattendue lève ValidationError (traduite en ApiError)
def _build_list(data: Any) -> List[Build]:
    return BuildList.model_validate(data if isinstance(data, dict) else {}).builds


def _user_builds(data: Any) -> List[Build]:
    if isinstance(data, dict):
        data = data.get("builds")
    return BuildList.model_validate({"builds": data}).builds


def _guide_list(data: Any) -> List[Guide]:
    return GuideList.model_validate(data if isinstance(data, dict) else {}).guides


class TacticsApiClient:
    """
    Client HTTP du backend.
    - Journalise chaque requête avec un identifiant de corrélation.
    - Renvoie des modèles Pydantic (Build/Guide) plutôt que des dicts bruts.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[Tuple[float, float]] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or (settings.HTTP_CONNECT_TIMEOUT, settings.HTTP_READ_TIMEOUT)

    def url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        payload: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        url = self.url(path)
        request_id = uuid4().hex[:12]
        extra = {"api_method": method, "api_url": url, "api_request_id": request_id}
        logger.debug("API request start", extra=extra)
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("API request timeout", extra=extra)
            raise ApiError(fallback) from exc
        except requests.RequestException as exc:
            logger.error("API request failed", exc_info=True, extra=extra)
            raise ApiError(fallback) from exc

        if not response.ok:
            message = _error_message(response, fallback)
            logger.warning(
                "API request rejected",
                extra={**extra, "api_status": response.status_code, "api_error": message},
            )
            raise ApiError(message, status_code=response.status_code)

        if not expect_json:
            return None
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Invalid JSON payload from API", exc_info=True, extra=extra)
            raise ApiError(fallback, status_code=response.status_code) from exc
        if parse is None:
            return data
        try:
            return parse(data)
        except ValidationError as exc:
            logger.error("Unexpected payload shape from API", exc_info=True,
                         extra={**extra, "api_status": response.status_code})
            raise ApiError(fallback, status_code=response.status_code) from exc

    # ------------------------------------------------------------------
    # Builds
    # ------------------------------------------------------------------
    def list_builds(self) -> List[Build]:
        return self._request("GET", "/builds", fallback="Failed to fetch builds", parse=_build_list)

    def get_build(self, build_id: str) -> Build:
        return self._request(
            "GET", f"/builds/{build_id}", fallback="Build not found", parse=Build.model_validate
        )

    def list_user_builds(self, user_id: str) -> List[Build]:
        return self._request(
            "GET", f"/builds/user/{user_id}", fallback="Failed to fetch your builds", parse=_user_builds
        )

    def create_build(self, payload: Dict[str, Any]) -> Build:
        return self._request(
            "POST", "/builds", payload=payload, fallback="Failed to create build",
            parse=Build.model_validate,
        )

    def update_build(self, build_id: str, payload: Dict[str, Any]) -> Build:
        return self._request(
            "PUT", f"/builds/{build_id}", payload=payload, fallback="Failed to update build",
            parse=Build.model_validate,
        )

    def delete_build(self, build_id: str, user_id: str) -> None:
        self._request(
            "DELETE",
            f"/builds/{build_id}",
            payload={"userId": user_id},
            fallback="Failed to delete build",
            expect_json=False,
        )

    def generate_guide(self, build_id: str, user_id: str) -> Dict[str, Any]:
        """Brouillon de guide généré par le backend (jamais persisté ici)."""
        data = self._request(
            "POST",
            f"/builds/{build_id}/generate-guide",
            payload={"userId": user_id},
            fallback="Failed to generate guide",
        )
        draft = data.get("guideData") if isinstance(data, dict) else None
        if not isinstance(draft, dict):
            raise ApiError("Failed to generate guide")
        return draft

    # ------------------------------------------------------------------
    # Guides
    # ------------------------------------------------------------------
    def list_guides(self) -> List[Guide]:
        return self._request("GET", "/guides", fallback="Failed to fetch guides", parse=_guide_list)

    def get_guide(self, guide_id: str) -> Guide:
        return self._request(
            "GET", f"/guides/{guide_id}", fallback="Guide not found", parse=Guide.model_validate
        )

    def create_guide(self, payload: Dict[str, Any]) -> Guide:
        return self._request(
            "POST", "/guides", payload=payload, fallback="Failed to create guide",
            parse=Guide.model_validate,
        )

    def update_guide(self, guide_id: str, payload: Dict[str, Any]) -> Guide:
        return self._request(
            "PUT", f"/guides/{guide_id}", payload=payload, fallback="Failed to update guide",
            parse=Guide.model_validate,
        )

    def delete_guide(self, guide_id: str, user_id: str) -> None:
        self._request(
            "DELETE",
            f"/guides/{guide_id}",
            payload={"userId": user_id},
            fallback="Failed to delete guide",
            expect_json=False,
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def register_google_user(self, google_id: str, name: str, email: str, picture: str) -> None:
        self._request(
            "POST",
            "/auth/google",
            payload={"googleId": google_id, "name": name, "email": email, "picture": picture},
            fallback="Backend user registration failed",
            expect_json=False,
        )
