"""
Models / user.py
Rôle:
- Utilisateur de session (issu du fournisseur d'identité, mis en cache localement).

Champs:
- id: identifiant Google (`sub` du jeton).
- name / email / picture: profil affiché (avatar = `picture`).
- token: jeton d'identité brut (opaque côté client).
"""
from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """Profil minimal persisté sous la clé de session du stockage local."""
    id: str
    name: str = ""
    email: str = ""
    picture: str = ""
    token: str = ""

    model_config = ConfigDict(extra="ignore")

    def public_view(self) -> dict:
        """Vue sans le jeton (pour les réponses API)."""
        return self.model_dump(exclude={"token"})
