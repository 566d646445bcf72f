"""
Module routes/auth.py

Rôle:
- Expose la session d'identité au navigateur : état courant, connexion Google,
  réception du jeton, déconnexion.

Flux Google Identity Services:
1) GET  /auth/config   → client_id + URL du script GIS (le navigateur initialise GIS).
2) POST /auth/signin   → déclenche le prompt du fournisseur (erreurs journalisées, jamais remontées).
3) POST /auth/callback → le navigateur transmet `credential` (JWT) ; la session décode,
   persiste l'utilisateur et prévient le backend en best-effort.
4) POST /auth/signout  → efface l'utilisateur (mémoire + stockage local).

Sécurité:
- Le jeton est décodé SANS vérification de signature : le backend doit le vérifier
  lui-même avant toute écriture.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.config.settings import settings
from app.deps.session import get_auth_session
from app.services.auth_session import AuthSession
from app.services.identity_provider import CredentialResponse, IdentityProviderError

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------- Modèles ----------

class CredentialIn(BaseModel):
    credential: str
    select_by: str = ""


# ---------- Routes ----------

@router.get("/session")
def session_state(auth: AuthSession = Depends(get_auth_session)):
    """Utilisateur courant (sans jeton) + drapeaux loading / is_initialized."""
    return auth.snapshot()


@router.get("/config")
def client_config(auth: AuthSession = Depends(get_auth_session)):
    """Mêmes options que celles passées au fournisseur au démarrage."""
    config = auth.provider_config()
    return {
        "client_id": config.client_id,
        "gsi_client_url": settings.GSI_CLIENT_URL,
        "login_uri": "/auth/callback",
        "auto_select": config.auto_select,
        "cancel_on_tap_outside": config.cancel_on_tap_outside,
    }


@router.post("/signin")
def sign_in(auth: AuthSession = Depends(get_auth_session)):
    auth.sign_in()
    return auth.snapshot()


@router.post("/callback")
def credential_callback(data: CredentialIn, auth: AuthSession = Depends(get_auth_session)):
    user = auth.handle_credential_response(
        CredentialResponse(credential=data.credential, select_by=data.select_by)
    )
    if user is None:
        raise HTTPException(400, "Invalid credential.")
    return auth.snapshot()


@router.post("/signout")
def sign_out(auth: AuthSession = Depends(get_auth_session)):
    try:
        auth.sign_out()
    except IdentityProviderError:
        raise HTTPException(500, "Error signing out.")
    return auth.snapshot()
