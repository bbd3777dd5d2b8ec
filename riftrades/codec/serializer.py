"""
Compact trade serializer.

Turns two ordered TradeCard lists into the versioned EncodedTradeRecord and
back. Pure functions: the clock is passed in, nothing is read from globals.

Wire shape:
    {"v": 1, "t": 29012345, "h": [["uid-1", 4.5], ["uid-2", 0.25, 3]], "w": []}
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

from riftrades.models.card import TradeCard
from riftrades.models.trade import TRADE_FORMAT_VERSION, CompactCardEntry, DecodedTrade

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000
MS_PER_DAY = 1000 * 60 * 60 * 24

# Minute timestamps past year 9999 are treated as missing
MAX_TIMESTAMP_MINUTES = 253_402_300_800 // 60


def round_price(price: float) -> float | int:
    """
    Render a price with exactly two fractional digits and read it back.

    Whole amounts come back as ints so they serialize without a trailing ".0".
    Prices needing more than two decimals lose that precision.
    """
    rounded = float(f"{float(price):.2f}")
    if rounded.is_integer():
        return int(rounded)
    return rounded


def compact_entry(card: TradeCard) -> CompactCardEntry:
    """Reduce a TradeCard to its compact entry, preferring the unique id."""
    identifier = card.unique_id or card.name
    return CompactCardEntry(
        identifier=identifier,
        price=round_price(card.price),
        quantity=card.quantity,
    )


def serialize(
    have: Iterable[TradeCard],
    want: Iterable[TradeCard],
    now: float,
) -> dict[str, Any]:
    """
    Build an EncodedTradeRecord.

    Args:
        have: Cards offered, in list order
        want: Cards requested, in list order
        now: Current time in epoch seconds

    Returns:
        JSON-ready dict with version, minute timestamp and compact entries
    """
    return {
        "v": TRADE_FORMAT_VERSION,
        "t": int(now // 60),
        "h": [compact_entry(card).to_wire() for card in have],
        "w": [compact_entry(card).to_wire() for card in want],
    }


def to_json(record: dict[str, Any]) -> str:
    """
    Render a record as minified, ASCII-only JSON.

    Non-ASCII characters are escaped, so the text never contains a
    compression sentinel.
    """
    return json.dumps(record, separators=(",", ":"), ensure_ascii=True, allow_nan=False)


def _read_entries(raw: Any, list_name: str) -> tuple[CompactCardEntry, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        logger.warning("Trade list %s is not a list, ignoring it", list_name)
        return ()

    entries: list[CompactCardEntry] = []
    for position, item in enumerate(raw):
        entry = CompactCardEntry.from_wire(item)
        if entry is None:
            logger.warning("Skipping malformed %s entry at position %d", list_name, position)
            continue
        entries.append(entry)
    return tuple(entries)


def _read_timestamp_ms(minutes: Any) -> int | None:
    """Milliseconds for a minute timestamp, or None when absent or out of range."""
    if isinstance(minutes, bool) or not isinstance(minutes, int | float):
        return None
    # NaN fails both comparisons
    if not 0 < minutes <= MAX_TIMESTAMP_MINUTES:
        if minutes:
            logger.warning("Ignoring out-of-range trade timestamp")
        return None
    return int(minutes * MS_PER_MINUTE)


def is_supported_version(version: Any) -> bool:
    """Only the integer version 1 is accepted; booleans do not count."""
    return type(version) is int and version == TRADE_FORMAT_VERSION


def deserialize(record: Any, now: float) -> DecodedTrade | None:
    """
    Validate an EncodedTradeRecord and unpack its entries.

    Args:
        record: Parsed JSON payload
        now: Current time in epoch seconds, used for the age

    Returns:
        DecodedTrade, or None when the payload is not a supported record
    """
    if not isinstance(record, dict):
        logger.warning("Trade payload is not an object: %s", type(record).__name__)
        return None

    version = record.get("v")
    if not is_supported_version(version):
        logger.warning("Unsupported trade data version: %r", version)
        return None

    timestamp_ms = _read_timestamp_ms(record.get("t"))
    age_in_days: float | None = None
    if timestamp_ms is not None:
        age_in_days = (now * 1000 - timestamp_ms) / MS_PER_DAY

    return DecodedTrade(
        version=version,
        timestamp_ms=timestamp_ms,
        have=_read_entries(record.get("h"), "have"),
        want=_read_entries(record.get("w"), "want"),
        age_in_days=age_in_days,
    )
