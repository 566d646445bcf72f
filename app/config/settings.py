"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du client (nom, host/port, URL du backend REST,
  identifiant Google, chemins de stockage local, timeouts HTTP).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from app.config.settings import settings`.

Bonnes pratiques
----------------
- `API_URL` retombe sur le backend local (http://localhost:5000) si absent.
- `GOOGLE_CLIENT_ID` vide => la connexion Google reste indisponible, l'UI
  propose seulement le bouton manuel.
- `DATA_DIR` calcule un chemin relatif au repo : `<repo>/app/data`.

Exemples de `.env`
------------------
APP_NAME="Tarnished Tactics (Staging)"
PORT=8080
API_URL="https://tarnished-tactics-backend.uc.r.appspot.com"
GOOGLE_CLIENT_ID="1234-abcd.apps.googleusercontent.com"
DATA_DIR="/var/opt/tarnished/data"
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Tarnished Tactics"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Backend REST (builds, guides, auth)
    API_URL: str = "http://localhost:5000"
    # Timeouts d'un appel unique (pas de retry)
    HTTP_CONNECT_TIMEOUT: float = 5.0
    HTTP_READ_TIMEOUT: float = 30.0

    # Google Identity Services
    GOOGLE_CLIENT_ID: str = ""
    GSI_CLIENT_URL: str = "https://accounts.google.com/gsi/client"

    # Stockage local persistant (équivalent du localStorage navigateur)
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
    SESSION_STORAGE_FILE: str = "local_storage.json"
    SESSION_USER_KEY: str = "tarnished_tactics_user"

    # Frontends autorisés (CORS)
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def api_base_url(self) -> str:
        """URL du backend sans slash final (ou défaut si la variable est vide)."""
        return (self.API_URL or "http://localhost:5000").rstrip("/")


# Instance unique importable partout : `settings`
settings = Settings()
