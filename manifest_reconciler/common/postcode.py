"""CEP (Brazilian postal code) normalisation."""

from __future__ import annotations

import re

CEP_RE = re.compile(r"^\d{8}$")

_SEPARATOR_RE = re.compile(r"[\s.\-]")


def is_valid_cep(value: str) -> bool:
    return bool(CEP_RE.match(value))


def normalise_postal_code(raw: str | None) -> str | None:
    """Strip separators from a typed postal code; None when nothing is left."""
    if raw is None:
        return None

    cleaned = _SEPARATOR_RE.sub("", str(raw).strip())
    if not cleaned:
        return None
    return cleaned
