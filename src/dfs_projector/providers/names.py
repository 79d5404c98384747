"""Player name normalization for matching MLB names against fantasy-site names."""

from __future__ import annotations

import re
import unicodedata
from difflib import SequenceMatcher

_NICKNAMES: dict[str, tuple[str, ...]] = {
    "william": ("bill", "billy", "will"),
    "robert": ("rob", "bob", "bobby"),
    "richard": ("rich", "rick", "dick", "ricky"),
    "michael": ("mike", "mikey"),
    "james": ("jim", "jimmy", "jamie"),
    "joseph": ("joe", "joey"),
    "christopher": ("chris",),
    "nicholas": ("nick",),
    "daniel": ("dan", "danny"),
    "anthony": ("tony",),
    "joshua": ("josh",),
    "matthew": ("matt",),
}
_CANONICAL: dict[str, str] = {nick: full for full, nicks in _NICKNAMES.items() for nick in nicks}
_SUFFIX = re.compile(r"\s+(jr|sr|ii|iii|iv)$")
_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()'\"]")


def normalize_name(name: str) -> str:
    """Reduce a player name to a comparable key.

    - "Last, First" becomes "first last"
    - accents are stripped via NFD decomposition
    - punctuation and generational suffixes (Jr., III) are dropped
    - known nicknames map to their full form ("Mike" -> "michael")
    """
    if not name:
        return ""
    if "," in name:
        last, _, first = name.partition(",")
        name = f"{first.strip()} {last.strip()}"
    normalized = unicodedata.normalize("NFD", name)
    normalized = "".join(c for c in normalized if unicodedata.category(c) != "Mn")
    normalized = _PUNCTUATION.sub("", normalized.lower())
    normalized = " ".join(normalized.split())
    normalized = _SUFFIX.sub("", normalized)
    return " ".join(_CANONICAL.get(word, word) for word in normalized.split(" "))


def name_similarity(first: str, second: str) -> float:
    """Similarity of two names on 0-1 after normalization."""
    a, b = normalize_name(first), normalize_name(second)
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return SequenceMatcher(None, a, b).ratio()
