"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI (client Tarnished Tactics), configure le CORS pour le front,
- Crée UNE fois les objets racine (client REST, stockage local, fournisseur
  d'identité, session) et les range dans `app.state` pour l'injection,
- Monte les routeurs (auth, builds, guides, my-builds, nav, health),
- Au démarrage : initialise le fournisseur d'identité hors boucle et liste les routes.

Notes
-----
- `create_app(...)` accepte des substituts (tests) pour chaque objet racine.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
- Un échec d'initialisation Google n'empêche pas l'app de démarrer : l'UI garde
  le bouton de connexion manuel.
"""
import logging
from typing import Optional

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config.settings import settings
from app.routes.auth import router as auth_router
from app.routes.builds import router as builds_router
from app.routes.guides import router as guides_router
from app.routes.health import router as health_router
from app.routes.my_builds import router as my_builds_router
from app.routes.nav import router as nav_router
from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession
from app.services.identity_provider import GoogleIdentityProvider, IdentityProvider
from app.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)


def create_app(
    *,
    api_client: Optional[TacticsApiClient] = None,
    identity_provider: Optional[IdentityProvider] = None,
    storage: Optional[LocalStorage] = None,
) -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    # ===========================
    # CORS
    # ===========================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===========================
    # Objets racine (injectés via app/deps/session.py)
    # ===========================
    api = api_client or TacticsApiClient()
    app.state.api_client = api
    app.state.auth_session = AuthSession(
        identity_provider or GoogleIdentityProvider(),
        storage or LocalStorage(),
        api,
    )

    # ===========================
    # Montage des routers
    # ===========================
    app.include_router(health_router)
    app.include_router(nav_router)
    app.include_router(auth_router)
    app.include_router(builds_router)
    app.include_router(guides_router)
    app.include_router(my_builds_router)

    @app.get("/")
    async def root():
        """Ping basique : permet de vérifier que l'app tourne (sans appel backend)."""
        return {"ok": True, "service": "tarnished-tactics"}

    @app.on_event("startup")
    async def initialize_identity():
        """
        - initialise le fournisseur d'identité dans un thread (appel réseau bloquant),
        - journalise l'URL du backend et la liste des routes (diagnostic).
        """
        await anyio.to_thread.run_sync(app.state.auth_session.initialize)
        logger.info("== API base URL == %s", api.base_url)
        for r in app.routes:
            methods = getattr(r, "methods", None)
            logger.info("route %s %s", getattr(r, "path", "?"), sorted(methods) if methods else "")

    @app.on_event("shutdown")
    async def close_clients():
        api.close()

    return app


app = create_app()
