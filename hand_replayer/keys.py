"""
Player-name canonicalization.

Every component addresses a player through the canonical key produced here;
raw names are kept only for display.
"""

import hashlib
import re
import unicodedata
from typing import Dict, Iterable, List

_NON_WORD = re.compile(r'[^\w\s]|_', re.UNICODE)
_SPACES = re.compile(r'\s+')


def canonical_key(name: str) -> str:
    """
    Normalize a free-form player name into a stable lookup key.

    Case, diacritics, punctuation and whitespace runs are all ignored:
    canonical_key("José María") == canonical_key("  JOSE  MARIA "),
    and canonical_key("Player_123!") == "player123".

    Args:
        name: Raw player name as it appears in the hand history

    Returns:
        Canonical key (never empty)
    """
    if name is None:
        raise TypeError("player name must be a string")

    decomposed = unicodedata.normalize('NFKD', name.casefold())
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _NON_WORD.sub('', stripped.casefold())
    key = _SPACES.sub(' ', cleaned).strip()

    if not key:
        # Names made only of punctuation still need a distinct key
        digest = hashlib.sha1(name.encode('utf-8')).hexdigest()[:12]
        key = f"anon {digest}"
    return key


class PlayerIndex:
    """Interns each canonical key of a hand into a small integer index."""

    def __init__(self, names: Iterable[str]):
        self._keys: List[str] = []
        self._index: Dict[str, int] = {}
        self._raw: Dict[str, str] = {}

        for name in names:
            key = canonical_key(name)
            if key in self._index:
                raise ValueError(
                    f"Players '{self._raw[key]}' and '{name}' share canonical key '{key}'"
                )
            self._index[key] = len(self._keys)
            self._keys.append(key)
            self._raw[key] = name

    def index_of(self, name_or_key: str) -> int:
        """Index for a raw name or an already canonical key."""
        key = canonical_key(name_or_key)
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"Unknown player: {name_or_key}") from None

    def key_of(self, index: int) -> str:
        return self._keys[index]

    def name_of(self, index: int) -> str:
        return self._raw[self._keys[index]]

    def keys(self) -> List[str]:
        return list(self._keys)

    def __contains__(self, name_or_key: str) -> bool:
        return canonical_key(name_or_key) in self._index

    def __len__(self) -> int:
        return len(self._keys)
