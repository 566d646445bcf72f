"""
Module routes/my_builds.py
Rôle:
- Page "My Builds" : builds de l'utilisateur de session, création/édition
  (la liste est rechargée après chaque succès) et suppression locale.

Garde-fous:
- Sans utilisateur : la page est en état `auth_required`, aucun appel backend.
"""
from fastapi import APIRouter, Depends

from app.deps.session import get_api_client, get_auth_session, raise_for_failure
from app.routes.builds import BuildForm, apply_build_form
from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession
from app.services.list_views import MyBuildsView, ViewState

router = APIRouter(prefix="/my-builds", tags=["my-builds"])


def _mounted_view(api: TacticsApiClient, auth: AuthSession) -> MyBuildsView:
    view = MyBuildsView(api, auth)
    view.load()
    if view.state is ViewState.AUTH_REQUIRED:
        raise_for_failure("Please sign in to view and create your builds.", 401)
    if view.state is ViewState.ERROR:
        raise_for_failure(view.error, view.error_status)
    return view


@router.get("")
def my_builds(
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = MyBuildsView(api, auth)
    view.load()
    return view.page()


@router.post("", status_code=201)
def create_my_build(
    form: BuildForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _mounted_view(api, auth)
    editor = view.open_editor()
    apply_build_form(editor, form)
    if editor.submit() is None:
        raise_for_failure(editor.error, editor.error_status)
    return view.page()


@router.put("/{build_id}")
def update_my_build(
    build_id: str,
    form: BuildForm,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    view = _mounted_view(api, auth)
    editor = view.open_editor(build_id)
    if editor is None:
        raise_for_failure(view.error, view.error_status)
    apply_build_form(editor, form)
    if editor.submit() is None:
        raise_for_failure(editor.error, editor.error_status)
    return view.page()


@router.delete("/{build_id}")
def delete_my_build(
    build_id: str,
    api: TacticsApiClient = Depends(get_api_client),
    auth: AuthSession = Depends(get_auth_session),
):
    """Supprime puis renvoie la liste sans le build (pas de rechargement)."""
    view = _mounted_view(api, auth)
    if not view.delete(build_id):
        raise_for_failure(view.error, view.error_status)
    return view.page()
