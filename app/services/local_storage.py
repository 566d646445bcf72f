"""
Service: local_storage.py
Rôle :
- Stockage clé/valeur persistant côté client (équivalent du `localStorage` navigateur).
- Les valeurs sont des chaînes (souvent du JSON sérialisé par l'appelant).

Stockage :
- `<DATA_DIR>/<SESSION_STORAGE_FILE>` : un objet JSON {clé: valeur}.

Robustesse :
- Fichier absent => stockage vide.
- Fichier illisible => journalisé puis ignoré (stockage vide, réécrit au prochain set).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Dict, Optional

import orjson

from app.config.settings import settings
from .io_utils import read_json, remove_file, write_json

logger = logging.getLogger(__name__)


def default_storage_path() -> Path:
    return Path(settings.DATA_DIR) / settings.SESSION_STORAGE_FILE


@dataclass
class LocalStorage:
    path: Path = field(default_factory=default_storage_path)
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    _items: Dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)

    def _load_nolock(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        try:
            data = read_json(self.path)
        except (orjson.JSONDecodeError, OSError):
            logger.warning("Unreadable local storage file, starting empty", exc_info=True,
                           extra={"storage_path": str(self.path)})
            data = None
        if isinstance(data, dict):
            self._items = {str(k): str(v) for k, v in data.items() if v is not None}
        else:
            self._items = {}

    def _flush_nolock(self) -> None:
        if self._items:
            write_json(self.path, self._items)
        else:
            remove_file(self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            self._load_nolock()
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._load_nolock()
            self._items[key] = value
            self._flush_nolock()

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._load_nolock()
            if self._items.pop(key, None) is not None:
                self._flush_nolock()

    def clear(self) -> None:
        with self._lock:
            self._items = {}
            self._loaded = True
            remove_file(self.path)
