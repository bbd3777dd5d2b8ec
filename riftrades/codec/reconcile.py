"""
Catalog Reconciliation.

Maps decoded compact entries back onto the CURRENT catalog. The catalog is
re-fetched on every page load, so it may be re-ordered, re-priced, or
missing cards that existed when the trade was shared.

MATCH ORDER (first strategy that matches wins):
1. UNIQUE_ID  - identifier is a known edition id; match its display name
2. EXACT      - normalized identifier equals a normalized group name
3. BASE_NAME  - same, with a trailing "(...)" suffix removed from both
4. SUBSTRING  - either normalized base name contains the other

Within one strategy, catalog order decides. Nothing here is random, so the
result depends only on the entry and the catalog passed in.

Entries that match nothing, or match a group without editions, are dropped
and logged. The output is dense and keeps the input order.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from riftrades.models.card import CardGroup, Edition, TradeCard
from riftrades.models.trade import CompactCardEntry, DecodedTrade, coerce_quantity

logger = logging.getLogger(__name__)

# Stored prices are rounded to cents
PRICE_TOLERANCE = 0.01

_APOSTROPHES = re.compile(r"['`‘’ʼ]")
_HYPHENS = re.compile(r"[-‐-―−]")
_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_EDITION_SUFFIX = re.compile(r"\s*\([^)]*\).*$")


@lru_cache(maxsize=8192)
def normalize_card_name(name: str) -> str:
    """
    Normalize a card name for comparison.

    Lowercases, drops apostrophes and backticks, turns hyphens and dashes
    into spaces, drops any other punctuation, and collapses whitespace.

    Example:
        >>> normalize_card_name("Kai'Sa - Daughter of the Void")
        'kaisa daughter of the void'
    """
    text = name.lower()
    text = _APOSTROPHES.sub("", text)
    text = _HYPHENS.sub(" ", text)
    text = _NON_WORD.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def base_card_name(name: str) -> str:
    """Remove a parenthesized edition/number suffix: "Bolt (12)" -> "Bolt"."""
    return _EDITION_SUFFIX.sub("", name).strip()


@lru_cache(maxsize=8192)
def _base_key(name: str) -> str:
    return normalize_card_name(base_card_name(name))


# =============================================================================
# MATCH STRATEGIES
# =============================================================================


class MatchStrategy(str, Enum):
    """How a compact entry was tied to a catalog group, in priority order."""

    UNIQUE_ID = "unique_id"
    EXACT = "exact"
    BASE_NAME = "base_name"
    SUBSTRING = "substring"

    @property
    def priority(self) -> int:
        return list(MatchStrategy).index(self)


def exact_name_match(identifier: str, group_name: str) -> bool:
    key = normalize_card_name(identifier)
    return bool(key) and key == normalize_card_name(group_name)


def base_name_match(identifier: str, group_name: str) -> bool:
    key = _base_key(identifier)
    return bool(key) and key == _base_key(group_name)


def substring_match(identifier: str, group_name: str) -> bool:
    key = _base_key(identifier)
    group_key = normalize_card_name(group_name)
    if not key or not group_key:
        return False
    return key in group_key or group_key in key


NAME_STRATEGIES: tuple[tuple[MatchStrategy, Callable[[str, str], bool]], ...] = (
    (MatchStrategy.EXACT, exact_name_match),
    (MatchStrategy.BASE_NAME, base_name_match),
    (MatchStrategy.SUBSTRING, substring_match),
)


@dataclass(frozen=True, slots=True)
class RankedMatch:
    """A catalog group matched by one strategy."""

    group: CardGroup
    strategy: MatchStrategy
    catalog_index: int

    @property
    def rank(self) -> tuple[int, int]:
        return (self.strategy.priority, self.catalog_index)


def _display_name_of(card: Any) -> str | None:
    """Display name of a lookup entry: a CatalogCard or a plain mapping."""
    if isinstance(card, Mapping):
        name = card.get("display_name") or card.get("displayName")
    else:
        name = getattr(card, "display_name", None)
    return name if isinstance(name, str) else None


def _best_strategy(
    identifier: str,
    group: CardGroup,
    id_display_name: str | None,
) -> MatchStrategy | None:
    if id_display_name is not None and group.name == id_display_name:
        return MatchStrategy.UNIQUE_ID
    for strategy, predicate in NAME_STRATEGIES:
        if predicate(identifier, group.name):
            return strategy
    return None


def match_candidates(
    identifier: str,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None = None,
) -> list[RankedMatch]:
    """
    Every group the identifier matches, best first.

    Each group appears once, under the highest-priority strategy it
    satisfies. Ties within a strategy keep catalog order.
    """
    id_display_name = None
    if id_lookup and identifier in id_lookup:
        id_display_name = _display_name_of(id_lookup[identifier])

    matches: list[RankedMatch] = []
    for index, group in enumerate(groups):
        strategy = _best_strategy(identifier, group, id_display_name)
        if strategy is not None:
            matches.append(RankedMatch(group=group, strategy=strategy, catalog_index=index))

    matches.sort(key=lambda match: match.rank)
    return matches


def find_best_match(
    identifier: str,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None = None,
) -> RankedMatch | None:
    matches = match_candidates(identifier, groups, id_lookup)
    return matches[0] if matches else None


def select_edition(group: CardGroup, price: float | None) -> Edition:
    """
    Pick the edition a stored price most likely came from.

    The first edition priced within a cent wins; otherwise the group's
    first edition. Two editions at the same price resolve by catalog order.

    Raises:
        ValueError: If the group has no editions
    """
    if not group.editions:
        raise ValueError(f"Card group has no editions: {group.name}")

    if price is not None:
        for edition in group.editions:
            if abs(edition.card_price - price) < PRICE_TOLERANCE:
                return edition
    return group.editions[0]


# =============================================================================
# RECONSTRUCTION
# =============================================================================


@dataclass(frozen=True, slots=True)
class ReconciliationMiss:
    """An entry left out of a reconstructed list."""

    identifier: str
    reason: str


@dataclass(frozen=True)
class ReconstructedTrade:
    """Both sides of a decoded trade rebuilt against the current catalog."""

    have: list[TradeCard]
    want: list[TradeCard]
    dropped: tuple[ReconciliationMiss, ...] = ()


def reconstruct_card(
    entry: CompactCardEntry,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None = None,
) -> TradeCard | ReconciliationMiss:
    """Rebuild one TradeCard, or describe why it cannot be rebuilt."""
    match = find_best_match(entry.identifier, groups, id_lookup)
    if match is None:
        logger.warning("Card not found: %s", entry.identifier)
        return ReconciliationMiss(entry.identifier, "not_found")

    group = match.group
    if not group.editions:
        logger.warning("Card group found but has no editions: %s", group.name)
        return ReconciliationMiss(entry.identifier, "no_editions")

    edition = select_edition(group, entry.price)
    return TradeCard(
        name=group.name,
        price=entry.price if entry.price is not None else edition.card_price,
        quantity=coerce_quantity(entry.quantity),
        card_group=group,
        available_editions=group.editions,
        unique_id=edition.unique_id,
        sub_type_name=edition.sub_type_name,
    )


def _reconstruct(
    entries: Iterable[Any] | None,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None,
) -> tuple[list[TradeCard], list[ReconciliationMiss]]:
    cards: list[TradeCard] = []
    misses: list[ReconciliationMiss] = []
    if entries is None or isinstance(entries, str | Mapping):
        return cards, misses

    for raw in entries:
        entry = raw if isinstance(raw, CompactCardEntry) else CompactCardEntry.from_wire(raw)
        if entry is None:
            logger.warning("Failed to reconstruct card from %r", raw)
            misses.append(ReconciliationMiss(str(raw), "malformed"))
            continue

        result = reconstruct_card(entry, groups, id_lookup)
        if isinstance(result, ReconciliationMiss):
            misses.append(result)
        else:
            cards.append(result)

    return cards, misses


def reconstruct_cards(
    entries: Iterable[Any] | None,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None = None,
) -> list[TradeCard]:
    """
    Rebuild TradeCards from compact entries against the current catalog.

    Args:
        entries: CompactCardEntry objects or raw wire tuples
        groups: Current catalog groups
        id_lookup: Optional map of edition unique id -> catalog card

    Returns:
        Reconstructed cards in entry order; unmatched entries are left out
    """
    cards, _ = _reconstruct(entries, groups, id_lookup)
    return cards


def reconstruct_trade(
    decoded: DecodedTrade,
    groups: Sequence[CardGroup],
    id_lookup: Mapping[str, Any] | None = None,
) -> ReconstructedTrade:
    """Rebuild both sides of a decoded trade and collect what was dropped."""
    have, have_misses = _reconstruct(decoded.have, groups, id_lookup)
    want, want_misses = _reconstruct(decoded.want, groups, id_lookup)
    return ReconstructedTrade(have=have, want=want, dropped=tuple(have_misses + want_misses))
