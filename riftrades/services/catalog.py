"""
Card catalog service.

Loads the consolidated price guide and shapes it into what the trade codec
consumes: ordered CardGroups (one per display name, one edition per variant)
and a unique-id lookup map.

Consolidated file layout:
    {"metadata": {...}, "data": [{"_uniqueId": "RB000001", "name": ..., ...}]}
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from riftrades.config import settings
from riftrades.models.card import CardGroup, CatalogCard, Edition

logger = logging.getLogger(__name__)

PriceType = Literal["market", "low"]

# Sealed product and accessories share the price guide with singles
NON_CARD_PATTERNS = (
    "booster box",
    "booster pack",
    "starter deck",
    "starter kit",
    "bundle",
    "collector box",
    "case",
    "display",
    "prerelease",
    "deck box",
    "playmat",
    "sleeves",
    "token",
)


@dataclass
class Catalog:
    """Everything the app needs from one catalog load."""

    cards: list[CatalogCard] = field(default_factory=list)
    groups: list[CardGroup] = field(default_factory=list)
    id_lookup: dict[str, CatalogCard] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    price_type: PriceType = "market"

    def group_named(self, name: str) -> CardGroup | None:
        for group in self.groups:
            if group.name == name:
                return group
        return None


def load_catalog_records(path: Path) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    """
    Read the consolidated price guide.

    Returns:
        (records, metadata)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no ``data`` list
    """
    if not path.exists():
        raise FileNotFoundError(f"Consolidated catalog not found at {path}.")

    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ValueError("Invalid consolidated data format")

    metadata = payload.get("metadata")
    return payload["data"], metadata if isinstance(metadata, dict) else {}


def is_actual_card(row: Mapping[str, Any]) -> bool:
    """False for sealed product, accessories and nameless rows."""
    name = str(row.get("name") or "")
    sub_type = str(row.get("subTypeName") or "").lower()
    lowered = name.lower()

    for pattern in NON_CARD_PATTERNS:
        if pattern in lowered or pattern in sub_type:
            return False

    return bool(name.strip())


def _number(row: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = row.get(key)
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _integer(row: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = row.get(key)
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def create_catalog_card(row: Mapping[str, Any]) -> CatalogCard:
    """
    Build a CatalogCard from one consolidated record.

    The display name carries the collector number when there is one, so
    reprints with different numbers stay distinct: "Flame Chompers (12)".
    """
    name = str(row.get("name") or "").strip()
    number = str(row.get("extNumber") or row.get("number") or "").strip()
    display_name = f"{name} ({number})" if number else name

    return CatalogCard(
        unique_id=str(row.get("_uniqueId") or ""),
        product_id=str(row.get("productId") or ""),
        name=name,
        display_name=display_name,
        sub_type_name=str(row.get("subTypeName") or ""),
        clean_name=str(row.get("cleanName") or ""),
        rarity=str(row.get("extRarity") or row.get("rarity") or ""),
        number=number,
        image_url=str(row.get("imageUrl") or ""),
        market_price=_number(row, "marketPrice"),
        low_price=_number(row, "lowPrice"),
        mid_price=_number(row, "midPrice"),
        high_price=_number(row, "highPrice"),
        direct_low_price=_number(row, "directLowPrice"),
        set_number=_integer(row, "_setNumber"),
    )


def process_records(records: Iterable[Mapping[str, Any]]) -> list[CatalogCard]:
    """Keep actual cards and shape them; everything else is counted and skipped."""
    cards: list[CatalogCard] = []
    skipped = 0
    for row in records:
        if not isinstance(row, Mapping) or not is_actual_card(row):
            skipped += 1
            continue
        cards.append(create_catalog_card(row))

    logger.info("Processed %d cards, filtered out %d non-card rows", len(cards), skipped)
    return cards


def group_cards_by_edition(
    cards: Iterable[CatalogCard],
    price_type: PriceType = "market",
) -> list[CardGroup]:
    """
    Group cards by display name, in first-seen order.

    Each distinct (sub type, product id) pair becomes one edition, priced
    by the requested price type.
    """
    editions_by_name: dict[str, list[Edition]] = {}
    seen: dict[str, set[tuple[str, str]]] = {}

    for card in cards:
        key = (card.sub_type_name, card.product_id)
        editions = editions_by_name.setdefault(card.display_name, [])
        keys = seen.setdefault(card.display_name, set())
        if key in keys:
            continue
        keys.add(key)
        editions.append(
            Edition(
                sub_type_name=card.sub_type_name,
                product_id=card.product_id,
                card_price=card.market_price if price_type == "market" else card.low_price,
                unique_id=card.unique_id,
            )
        )

    return [CardGroup(name=name, editions=tuple(eds)) for name, eds in editions_by_name.items()]


def build_id_lookup(cards: Iterable[CatalogCard]) -> dict[str, CatalogCard]:
    """Map edition unique ids to their catalog cards."""
    return {card.unique_id: card for card in cards if card.unique_id}


def build_catalog(
    records: Iterable[Mapping[str, Any]],
    price_type: PriceType = "market",
    metadata: dict[str, Any] | None = None,
) -> Catalog:
    cards = process_records(records)
    return Catalog(
        cards=cards,
        groups=group_cards_by_edition(cards, price_type),
        id_lookup=build_id_lookup(cards),
        metadata=metadata or {},
        price_type=price_type,
    )


def load_catalog(path: Path | None = None, price_type: PriceType | None = None) -> Catalog:
    """
    Load and shape the consolidated catalog.

    Args:
        path: Consolidated JSON file. Defaults to settings.catalog_path
        price_type: Price column for editions. Defaults to settings.price_type

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the catalog file is malformed
    """
    path = path or settings.catalog_path
    records, metadata = load_catalog_records(path)
    catalog = build_catalog(records, price_type or settings.price_type, metadata)
    logger.info("Loaded %d card groups from %s", len(catalog.groups), path)
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """
    Get the cached catalog.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
    """
    return load_catalog()
