"""Pure string transforms shared by street matching and cache keys."""

from __future__ import annotations

import re

STREET_PREFIXES = frozenset(
    {"r", "rua", "av", "avenida", "tv", "travessa", "psg", "passagem", "pç", "praça"}
)

_ACCENT_TABLE = str.maketrans(
    "áàâãäéèêëíìîïóòôõöúùûüç()",
    "aaaaaeeeeiiiiooooouuuuc  ",
)

_SHORT_WORD_RE = re.compile(r"\b[a-zA-Z]{1,2}\b,?\s*")
_KEY_SEPARATOR_RE = re.compile(r",\s*|\s+")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_accents(text: str) -> str:
    return text.lower().translate(_ACCENT_TABLE)


def strip_prefixes(text: str) -> str:
    words = [word for word in text.split() if word.lower() not in STREET_PREFIXES]
    return " ".join(words).strip()


def drop_short_words(text: str) -> str:
    """Drop one- and two-letter words ("de", "da", "R,") and tidy the spacing."""
    dropped = _SHORT_WORD_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", dropped).strip()


def normalize_key(text: str) -> str:
    return _KEY_SEPARATOR_RE.sub("_", strip_accents(text))
