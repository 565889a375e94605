"""Pickup address composition.

Delivery settings store the pickup address as one free-text string. The admin
form edits it as structured fields, so the string is split back apart with a
heuristic: tokens carrying a known Russian prefix go to their field, the rest
are positional (city, then street, then everything else is the comment).

The parse is lossy. A string written in another token order, or with a comma
inside the street, does not survive a round trip. That ambiguity is kept as
is rather than guessed around.
"""

from dataclasses import asdict, dataclass
from typing import Optional

SEPARATOR = ", "

APARTMENT_PREFIX = "кв/офис "
FLOOR_PREFIX = "этаж "
INTERCOM_PREFIX = "домофон "

# field name -> prefix, in the order segments are written back out
PREFIXED_FIELDS = (
    ("apartment", APARTMENT_PREFIX),
    ("floor", FLOOR_PREFIX),
    ("intercom", INTERCOM_PREFIX),
)


@dataclass
class AddressParts:
    city: str = ""
    street: str = ""
    apartment: str = ""
    floor: str = ""
    intercom: str = ""
    comment: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def parse_address(address: Optional[str]) -> AddressParts:
    """Split a stored address string into its parts."""
    parts = AddressParts()
    if not address:
        return parts

    positional: list[str] = []
    for raw_token in address.split(","):
        token = raw_token.strip()
        if not token:
            continue
        for field, prefix in PREFIXED_FIELDS:
            if token.startswith(prefix):
                setattr(parts, field, token[len(prefix):].strip())
                break
        else:
            positional.append(token)

    if positional:
        parts.city = positional[0]
    if len(positional) > 1:
        parts.street = positional[1]
    if len(positional) > 2:
        parts.comment = SEPARATOR.join(positional[2:])
    return parts


def build_address(parts: AddressParts) -> str:
    """Join the non-empty parts into the single stored string."""
    segments = [parts.city.strip(), parts.street.strip()]
    for field, prefix in PREFIXED_FIELDS:
        value = getattr(parts, field).strip()
        segments.append(f"{prefix}{value}" if value else "")
    segments.append(parts.comment.strip())
    return SEPARATOR.join(segment for segment in segments if segment)
