"""
Module routes/builds.py
Rôle:
- Pages "Builds" : liste, détail, création, édition inline, suppression,
  génération d'un brouillon de guide à partir d'un build.

Intégrations:
- `BuildListView` / `BuildDetailView` / `BuildEditor` (services), un objet par requête.
- `AuthSession` et `TacticsApiClient` injectés via `app/deps/session.py`.

Codes retour:
- 400 formulaire invalide (champ requis manquant, classe/stat inconnue),
- 401 pas d'utilisateur de session, 403 build d'un autre utilisateur,
- 404 build introuvable (la page d'erreur garde le lien retour `/builds`),
- 502 backend indisponible / réponse inexploitable.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.deps.session import get_api_client, get_auth_session, http_status_for, raise_for_failure
from app.models.build import ARMOR_SLOTS, STARTING_CLASSES, STAT_NAMES
from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession
from app.services.detail_views import BuildDetailView
from app.services.editors import BuildEditor
from app.services.list_views import BuildListView, ViewState

router = APIRouter(prefix="/builds", tags=["builds"])

ItemList = Union[str, List[str], None]


# ---------- Modèles ----------

class BuildForm(BaseModel):
    """Saisie brute du formulaire ; les champs absents restent inchangés."""
    name: Optional[str] = None
    description: Optional[str] = None
    character_class: Optional[str] = Field(None, alias="class")
    stats: Optional[Dict[str, Any]] = None  # "" toléré (case vidée)
    right_hand: ItemList = Field(None, alias="rightHand")  # "a, b" ou liste
    left_hand: ItemList = Field(None, alias="leftHand")
    armor: Optional[Dict[str, Optional[str]]] = None
    talismans: ItemList = None
    spells: ItemList = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = Field(None, alias="isPublic")

    model_config = ConfigDict(populate_by_name=True)

    def as_form(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


# ---------- Helpers ----------

def apply_build_form(editor: BuildEditor, form: BuildForm) -> None:
    try:
        editor.apply_form(form.as_form())
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def _detail_page(view: BuildDetailView) -> JSONResponse:
    status = 200 if view.state is not ViewState.ERROR else http_status_for(view.error_status)
    return JSONResponse(view.page(), status_code=status)


def _loaded_detail(build_id: str, api: TacticsApiClient, auth: AuthSession) -> BuildDetailView:
    view = BuildDetailView(api, auth, build_id)
    view.load()
    if view.state is ViewState.ERROR:
        raise_for_failure(view.error, view.error_status)
    return view


# ---------- Routes ----------

@router.get("")
def list_builds(
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Tous les builds (communauté + presets), sans pagination."""
    view = BuildListView(api, auth)
    view.load()
    return view.page()


@router.get("/options")
def build_options():
    """Listes fermées utilisées par le formulaire."""
    return {"classes": STARTING_CLASSES, "stats": STAT_NAMES, "armor_slots": ARMOR_SLOTS}


@router.post("/preview")
def preview_build(
    form: BuildForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Normalise le formulaire et calcule le niveau, sans appel réseau."""
    editor = BuildEditor(api, auth)
    apply_build_form(editor, form)
    return editor.form_view()


@router.post("", status_code=201)
def create_build(
    form: BuildForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    editor = BuildEditor(api, auth)
    apply_build_form(editor, form)
    created = editor.submit()
    if created is None:
        raise_for_failure(editor.error, editor.error_status)
    return created.model_dump(by_alias=True)


@router.get("/{build_id}")
def get_build(
    build_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = BuildDetailView(api, auth, build_id)
    view.load()
    return _detail_page(view)


@router.get("/{build_id}/edit")
def edit_build_form(
    build_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Page de détail basculée en mode édition (formulaire prérempli)."""
    view = _loaded_detail(build_id, api, auth)
    if view.begin_edit() is None:
        raise_for_failure(view.action_error, view.action_status)
    return view.page()


@router.put("/{build_id}")
def update_build(
    build_id: str,
    form: BuildForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Édition : PUT puis rechargement du build (la page renvoyée est fraîche)."""
    view = _loaded_detail(build_id, api, auth)
    editor = view.begin_edit()
    if editor is None:
        raise_for_failure(view.action_error, view.action_status)
    apply_build_form(editor, form)
    if editor.submit() is None:
        raise_for_failure(editor.error, editor.error_status)
    return _detail_page(view)


@router.delete("/{build_id}")
def delete_build(
    build_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _loaded_detail(build_id, api, auth)
    if not view.delete():
        raise_for_failure(view.action_error, view.action_status)
    return {"ok": True, "redirect": view.redirect}


@router.post("/{build_id}/generate-guide")
def generate_guide(
    build_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Brouillon de guide généré par le backend, ouvert dans l'éditeur (non persisté)."""
    view = _loaded_detail(build_id, api, auth)
    if view.generate_guide() is None:
        raise_for_failure(view.action_error, view.action_status)
    return view.page()
