"""
Shared Trade Models.

A shared trade travels as an EncodedTradeRecord:

    {"v": 1, "t": <minutes since epoch>, "h": [...], "w": [...]}

where every list item is a positional CompactCardEntry tuple
``[identifier, price]`` or ``[identifier, price, quantity]``.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

TRADE_FORMAT_VERSION = 1

# Decoded quantities and prices are clamped so totals stay finite
MAX_QUANTITY = 9999
MAX_PRICE = 1_000_000.0

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_quantity(value: Any) -> int:
    """
    Coerce a decoded quantity to a positive integer.

    Integers and floats are truncated, strings are read up to the first
    non-digit. Anything non-numeric or not positive becomes 1, and anything
    above MAX_QUANTITY becomes MAX_QUANTITY.
    """
    if isinstance(value, bool) or value is None:
        return 1
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return 1
        quantity = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return 1
        digits = match.group(1)
        try:
            quantity = int(digits)
        except ValueError:
            # longer than the int conversion limit
            return 1 if digits.startswith("-") else MAX_QUANTITY
    else:
        return 1
    return min(max(1, quantity), MAX_QUANTITY)


def coerce_price(value: Any) -> float | None:
    """
    Return a decoded price as a float.

    None when the value is not numeric, not finite, or its magnitude is
    above MAX_PRICE.
    """
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, int | float | str):
        return None
    try:
        price = float(value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(price) or abs(price) > MAX_PRICE:
        return None
    return price


@dataclass(frozen=True, slots=True)
class CompactCardEntry:
    """
    Minimal representation of one card inside a share URL.

    Attributes:
        identifier: Edition unique id when known, else the display name
        price: Price rounded to two decimals (None if the payload had none)
        quantity: Copies, omitted on the wire when 1
    """

    identifier: str
    price: float | None
    quantity: int = 1

    def to_wire(self) -> list[Any]:
        """Positional tuple with the quantity dropped when it is 1."""
        wire: list[Any] = [self.identifier, self.price]
        if self.quantity > 1:
            wire.append(self.quantity)
        return wire

    @classmethod
    def from_wire(cls, raw: Any) -> "CompactCardEntry | None":
        """
        Build an entry from its wire form.

        Accepts the positional list form and the older ``{"n", "p", "q"}``
        object form. Returns None when no usable identifier is present.
        """
        if isinstance(raw, list):
            if not raw:
                return None
            identifier = raw[0]
            price = raw[1] if len(raw) > 1 else None
            quantity = raw[2] if len(raw) > 2 else 1
        elif isinstance(raw, dict):
            identifier = raw.get("n")
            price = raw.get("p")
            quantity = raw.get("q", 1)
        else:
            return None

        if isinstance(identifier, int | float) and not isinstance(identifier, bool):
            identifier = str(identifier)
        if not isinstance(identifier, str) or not identifier.strip():
            return None

        return cls(
            identifier=identifier,
            price=coerce_price(price),
            quantity=coerce_quantity(quantity),
        )


@dataclass(frozen=True, slots=True)
class DecodedTrade:
    """
    A trade read back from a share URL, before reconciliation.

    Attributes:
        version: Wire format version (always TRADE_FORMAT_VERSION)
        timestamp_ms: Encode time truncated to the minute, in milliseconds
        have: Entries offered by the sharer, in original order
        want: Entries requested by the sharer, in original order
        age_in_days: Age relative to the decoding clock
    """

    version: int
    timestamp_ms: int | None
    have: tuple[CompactCardEntry, ...]
    want: tuple[CompactCardEntry, ...]
    age_in_days: float | None = None
