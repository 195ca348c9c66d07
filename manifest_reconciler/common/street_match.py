"""Decide whether a typed street name and an authoritative one denote the same street."""

from __future__ import annotations

import re

from manifest_reconciler.common.text import drop_short_words, strip_accents, strip_prefixes

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def clean_street_name(text: str) -> str:
    return strip_prefixes(text)


def _user_tokens(user_street: str) -> set[str]:
    cleaned = drop_short_words(strip_prefixes(user_street)).replace("'", "")
    return set(_NON_ALNUM_RE.sub("", strip_accents(cleaned)).split())


def _authority_tokens(authority_street: str) -> set[str]:
    return set(strip_accents(authority_street.replace("'", "")).split())


def street_name_matches(user_street: str, authority_street: str) -> bool:
    # Any shared word counts as a match; prefixes and filler words never reach
    # the comparison on the typed side.
    return bool(_user_tokens(user_street) & _authority_tokens(authority_street))
