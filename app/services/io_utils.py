"""
Utilitaires IO JSON basés sur orjson.
- read_json(Path)        → Any | None (None si fichier manquant)
- write_json(Path, data) → écrit en binaire (création des dossiers si besoin)
- remove_file(Path)      → supprime le fichier s'il existe

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- Un contenu illisible lève `orjson.JSONDecodeError` : c'est à l'appelant de décider.
"""
import orjson as json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return json.loads(f.read())


def write_json(path: Path, data: Any) -> None:
    """Écrit via un fichier temporaire puis remplace, pour ne jamais laisser un JSON tronqué."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with tmp.open("wb") as f:
        f.write(json.dumps(data, option=json.OPT_INDENT_2))
    tmp.replace(path)


def remove_file(path: Path) -> None:
    path.unlink(missing_ok=True)
