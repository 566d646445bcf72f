"""
Module routes/health.py
Rôle:
- Endpoints de santé : service OK, et ping du backend REST Tarnished Tactics.

Intégrations:
- settings: nom d'app exposé par /health.
- TacticsApiClient.list_builds: appel léger pour mesurer la latence du backend.
"""
import time

from fastapi import APIRouter, Depends

from app.config.settings import settings
from app.deps.session import get_api_client
from app.services.api_client import ApiError, TacticsApiClient

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """OK minimal, sans appel backend."""
    return {"ok": True, "service": settings.APP_NAME}


@router.get("/backend")
def health_backend(api: TacticsApiClient = Depends(get_api_client)):
    """
    Un seul GET /api/v1/builds (pas de retry) :
    - succès : nombre de builds renvoyés,
    - échec : message d'erreur du client (corps `error` ou message générique).
    """
    report = {"api_url": api.base_url}
    started = time.perf_counter()
    try:
        report["builds"] = len(api.list_builds())
        report["ok"] = True
    except ApiError as exc:
        report["ok"] = False
        report["error"] = exc.message
        report["status_code"] = exc.status_code
    report["latency_s"] = round(time.perf_counter() - started, 3)
    return report
