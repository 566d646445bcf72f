"""
Utilitaires de formulaires (purs, sans état).

- coerce_stat(value)            → int dans [0, 99], ou "" (saisie vide transitoire)
- parse_item_list(text)         → liste ordonnée d'items (séparés par virgules)
- join_item_list(items)         → texte "a, b, c" pour réafficher le champ
- add_unique_tag(tags, raw)     → nouvelle liste avec le tag (si non vide et absent)
- remove_tag(tags, tag)         → nouvelle liste sans le tag (égalité exacte)
- unique_in_order(items)        → déduplication en conservant l'ordre
"""
from __future__ import annotations

from typing import Any, Iterable, List, Union

STAT_MIN = 0
STAT_MAX = 99

StatValue = Union[int, str]


def clamp_stat(value: int) -> int:
    return max(STAT_MIN, min(STAT_MAX, value))


def coerce_stat(value: Any, allow_blank: bool = True) -> StatValue:
    """
    Normalise la saisie d'une stat.
    - "" (ou espaces) reste "" tant que `allow_blank` (l'utilisateur vide la case),
    - une valeur non numérique devient 0,
    - le reste est borné à [0, 99].
    """
    if value is None:
        return "" if allow_blank else 0
    if isinstance(value, int):
        return clamp_stat(value)
    text = str(value).strip()
    if not text:
        return "" if allow_blank else 0
    try:
        number = int(float(text))
    except (ValueError, OverflowError):
        return 0
    return clamp_stat(number)


def stat_as_int(value: StatValue) -> int:
    """Valeur utilisable dans un calcul : "" compte pour 0."""
    if value == "" or value is None:
        return 0
    return int(value)


def parse_item_list(text: Any) -> List[str]:
    """Découpe un champ "a, b, c" : trim, suppression des entrées vides, ordre conservé."""
    if text is None:
        return []
    if isinstance(text, (list, tuple)):
        raw = [str(item) for item in text if item is not None]
    else:
        raw = str(text).split(",")
    return [item.strip() for item in raw if item.strip()]


def join_item_list(items: Iterable[str]) -> str:
    return ", ".join(items)


def unique_in_order(items: Iterable[Any]) -> List[Any]:
    seen = set()
    out: List[Any] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def add_unique_tag(tags: List[str], raw: Any) -> List[str]:
    tag = str(raw or "").strip()
    if not tag or tag in tags:
        return list(tags)
    return [*tags, tag]


def remove_tag(tags: List[str], tag: str) -> List[str]:
    return [t for t in tags if t != tag]
