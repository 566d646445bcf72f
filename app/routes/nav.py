"""
Module routes/nav.py
Rôle:
- Table de navigation de l'en-tête (Home, Builds, Guides, + My Builds si connecté).
- Marque comme actif l'élément dont le chemin égale le chemin courant.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, Query

from app.deps.session import get_auth_session
from app.services.auth_session import AuthSession

router = APIRouter(prefix="/nav", tags=["nav"])

BASE_ITEMS = [
    {"path": "/", "label": "Home"},
    {"path": "/builds", "label": "Builds"},
    {"path": "/guides", "label": "Guides"},
]
AUTH_ITEMS = [{"path": "/my-builds", "label": "My Builds"}]


def nav_items(current_path: str, authenticated: bool) -> List[Dict[str, object]]:
    items = BASE_ITEMS + (AUTH_ITEMS if authenticated else [])
    return [{**item, "active": item["path"] == current_path} for item in items]


@router.get("")
def navigation(
    path: str = Query(default="/", description="Chemin courant du navigateur"),
    auth: AuthSession = Depends(get_auth_session),
):
    return {"items": nav_items(path, auth.is_authenticated), "user": auth.snapshot()["user"]}
