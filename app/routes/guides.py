"""
Module routes/guides.py
Rôle:
- Pages "Guides" : liste, détail (couleurs difficulté/catégorie), création,
  édition inline, suppression.

Notes:
- Un brouillon généré depuis un build (`POST /builds/{id}/generate-guide`) est
  enregistré ici, via `POST /guides`, seulement quand l'utilisateur soumet.
- Mêmes codes retour que `routes/builds.py`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.deps.session import get_api_client, get_auth_session, http_status_for, raise_for_failure
from app.models.guide import GUIDE_CATEGORIES, GUIDE_DIFFICULTIES
from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession
from app.services.detail_views import GuideDetailView
from app.services.editors import GuideEditor
from app.services.list_views import GuideListView, ViewState

router = APIRouter(prefix="/guides", tags=["guides"])


class GuideForm(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    recommended_level: Union[int, str, None] = Field(None, alias="recommendedLevel")
    associated_builds: Union[str, List[str], None] = Field(None, alias="associatedBuilds")
    tags: Optional[List[str]] = None
    images: Union[str, List[str], None] = None
    is_public: Optional[bool] = Field(None, alias="isPublic")

    model_config = ConfigDict(populate_by_name=True)

    def as_form(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


def apply_guide_form(editor: GuideEditor, form: GuideForm) -> None:
    try:
        editor.apply_form(form.as_form())
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def _detail_page(view: GuideDetailView) -> JSONResponse:
    status = 200 if view.state is not ViewState.ERROR else http_status_for(view.error_status)
    return JSONResponse(view.page(), status_code=status)


def _loaded_detail(guide_id: str, api: TacticsApiClient, auth: AuthSession) -> GuideDetailView:
    view = GuideDetailView(api, auth, guide_id)
    view.load()
    if view.state is ViewState.ERROR:
        raise_for_failure(view.error, view.error_status)
    return view


@router.get("")
def list_guides(
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = GuideListView(api, auth)
    view.load()
    return view.page()


@router.get("/options")
def guide_options():
    return {"categories": GUIDE_CATEGORIES, "difficulties": GUIDE_DIFFICULTIES}


@router.post("", status_code=201)
def create_guide(
    form: GuideForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    editor = GuideEditor(api, auth)
    apply_guide_form(editor, form)
    created = editor.submit()
    if created is None:
        raise_for_failure(editor.error, editor.error_status)
    return created.model_dump(by_alias=True)


@router.get("/{guide_id}")
def get_guide(
    guide_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = GuideDetailView(api, auth, guide_id)
    view.load()
    return _detail_page(view)


@router.get("/{guide_id}/edit")
def edit_guide_form(
    guide_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _loaded_detail(guide_id, api, auth)
    if view.begin_edit() is None:
        raise_for_failure(view.action_error, view.action_status)
    return view.page()


@router.put("/{guide_id}")
def update_guide(
    guide_id: str,
    form: GuideForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _loaded_detail(guide_id, api, auth)
    editor = view.begin_edit()
    if editor is None:
        raise_for_failure(view.action_error, view.action_status)
    apply_guide_form(editor, form)
    if editor.submit() is None:
        raise_for_failure(editor.error, editor.error_status)
    return _detail_page(view)


@router.delete("/{guide_id}")
def delete_guide(
    guide_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _loaded_detail(guide_id, api, auth)
    if not view.delete():
        raise_for_failure(view.action_error, view.action_status)
    return {"ok": True, "redirect": view.redirect}
