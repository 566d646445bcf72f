"""
Dépendances FastAPI : accès à la session d'identité et au client REST
=====================================================================

Objectif
--------
Le détenteur de session (`AuthSession`) et le client backend (`TacticsApiClient`)
sont créés UNE fois à la racine de l'app (`create_app`) et rangés dans
`app.state`. Les routes les reçoivent par injection (`Depends`), jamais via une
variable globale.

API exposée ici
---------------
- `get_auth_session` / `get_api_client` : accès aux instances racine.
- `raise_for_failure(message, status)` : traduit une erreur d'éditeur/vue en HTTPException
  (404 conservé, 4xx conservés, le reste => 502).
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession


def get_auth_session(request: Request) -> AuthSession:
    return request.app.state.auth_session


def get_api_client(request: Request) -> TacticsApiClient:
    return request.app.state.api_client


def http_status_for(status: Optional[int]) -> int:
    if status is not None and 400 <= status < 500:
        return status
    return 502


def raise_for_failure(message: Optional[str], status: Optional[int]) -> None:
    raise HTTPException(status_code=http_status_for(status), detail=message or "Unexpected error")
