"""Split a free-text destination address into street, number and complement."""

from __future__ import annotations

import re
from dataclasses import dataclass

from manifest_reconciler.common.models import AddressParts

ADDRESS_RE = re.compile(r"^(?P<street>.*?),\s*(?P<number>\d+)(?:,\s*(?P<complement>.*))?$")

_LEADING_COMMA_RE = re.compile(r"^,\s*")


@dataclass(frozen=True)
class AddressSplit:
    main_address: str
    complement: str | None
    parts: AddressParts | None

    @property
    def matched(self) -> bool:
        return self.parts is not None


def _clean_complement(value: str | None) -> str | None:
    if value is None:
        return None
    return _LEADING_COMMA_RE.sub("", value).strip()


def split_address(raw: str) -> AddressSplit:
    """Split ``"<street>, <number>[, <complement>]"``.

    Text that does not have that shape comes back untouched as the main address with
    no complement.
    """
    match = ADDRESS_RE.match(raw)
    if match is None:
        return AddressSplit(main_address=raw, complement=None, parts=None)

    street = match.group("street")
    number = match.group("number")
    complement = _clean_complement(match.group("complement"))
    return AddressSplit(
        main_address=f"{street}, {number}".strip(),
        complement=complement,
        parts=AddressParts(street=street.strip(), number=number, complement=complement),
    )


def street_segment(address: str) -> str:
    return address.split(",", 1)[0].strip()


def replace_street_segment(address: str, street_name: str) -> str:
    """Swap the text before the first comma, keeping the rest verbatim."""
    if "," not in address:
        return street_name
    return f"{street_name},{address.split(',', 1)[1]}"


def street_and_number(address: str) -> tuple[str | None, str | None]:
    parts = address.split(",")
    street = parts[0].strip() or None
    number = None
    if len(parts) > 1:
        tokens = parts[1].split()
        number = tokens[0] if tokens else None
    return street, number
