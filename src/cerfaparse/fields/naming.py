"""Field-key generation and document-wide deduplication.

Keys look like ``p{page}_{camelCaseLabel}`` (``"Date de naissance :"`` on
page 1 becomes ``p1_dateDeNaissance``).  Uniqueness is tracked by a
:class:`NameRegistry` that every naming stage receives and returns, so
the caller decides how names flow between pages.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Iterable, Tuple

_TRAILING_COLON_RE = re.compile(r"\s*:\s*$")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\s]")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def generate_field_name(label_text: str, page: int) -> str:
    """Build the base key for a field captioned *label_text* on *page*.

    An empty label, or one with nothing left after cleaning, gives
    ``p{page}_field``.
    """
    fallback = f"p{page}_field"
    if not label_text:
        return fallback

    cleaned = _TRAILING_COLON_RE.sub("", label_text, count=1).strip()
    cleaned = _NON_ALNUM_RE.sub("", _strip_diacritics(cleaned))
    tokens = cleaned.split()
    if not tokens:
        return fallback

    camel = tokens[0].lower() + "".join(
        t[:1].upper() + t[1:].lower() for t in tokens[1:]
    )
    return f"p{page}_{camel}"


def deduplicate_name(base: str, used: AbstractSet[str]) -> str:
    """Return *base*, or the first free ``base_2``, ``base_3``, ..."""
    if base not in used:
        return base
    counter = 2
    while f"{base}_{counter}" in used:
        counter += 1
    return f"{base}_{counter}"


@dataclass(frozen=True)
class NameRegistry:
    """Immutable set of keys already assigned in a document."""

    names: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, names: Iterable[str]) -> "NameRegistry":
        return cls(frozenset(names))

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)

    def claim(self, base: str) -> Tuple[str, "NameRegistry"]:
        """Pick a free name for *base*; return it with the extended registry."""
        name = deduplicate_name(base, self.names)
        return name, NameRegistry(self.names | {name})
