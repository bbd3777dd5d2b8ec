"""
Trade list operations and arithmetic.

Totals and differences over have/want lists, plus the list edits the app
performs: adding a card picked from the catalog, removing it or changing its
quantity, and re-pricing cards when the catalog is reloaded under a
different price type.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from riftrades.config import settings
from riftrades.models.card import CardGroup, TradeCard
from riftrades.models.trade import DecodedTrade, coerce_quantity


@dataclass(frozen=True)
class TradeSummary:
    """Totals for both sides of a trade."""

    have_total: float
    want_total: float
    difference: float
    have_count: int
    want_count: int

    @property
    def is_even(self) -> bool:
        """True when both sides are within a cent of each other."""
        return abs(self.difference) < 0.01


def calculate_total(cards: Iterable[TradeCard]) -> float:
    return sum((card.price * card.quantity for card in cards), 0.0)


def calculate_diff(have_total: float, want_total: float) -> float:
    """Positive when the have side is worth more."""
    return have_total - want_total


def summarize_trade(have: Sequence[TradeCard], want: Sequence[TradeCard]) -> TradeSummary:
    have_total = calculate_total(have)
    want_total = calculate_total(want)
    return TradeSummary(
        have_total=have_total,
        want_total=want_total,
        difference=calculate_diff(have_total, want_total),
        have_count=sum(card.quantity for card in have),
        want_count=sum(card.quantity for card in want),
    )


def create_trade_card(
    group: CardGroup,
    sub_type_name: str | None = None,
    unique_id: str | None = None,
) -> TradeCard:
    """
    Create a TradeCard for a catalog group.

    The edition is chosen by sub type when given, else the first edition.

    Raises:
        ValueError: If the group has no editions
    """
    if not group.editions:
        raise ValueError(f"Card group has no editions: {group.name}")

    edition = group.editions[0]
    if sub_type_name:
        edition = next(
            (e for e in group.editions if e.sub_type_name == sub_type_name),
            group.editions[0],
        )

    return TradeCard(
        name=group.name,
        price=edition.card_price,
        quantity=1,
        card_group=group,
        available_editions=group.editions,
        unique_id=unique_id or edition.unique_id,
        sub_type_name=edition.sub_type_name or "Normal",
    )


def add_card(
    cards: list[TradeCard],
    group: CardGroup,
    sub_type_name: str | None = None,
    unique_id: str | None = None,
) -> bool:
    """
    Append a card unless the list already holds it.

    With a unique id, duplicates are detected by id; without one, by name.
    Groups without editions are ignored.

    Returns:
        True if the card was added
    """
    if unique_id:
        exists = any(card.unique_id == unique_id for card in cards)
    else:
        exists = any(card.name == group.name for card in cards)

    if exists or not group.editions:
        return False

    cards.append(create_trade_card(group, sub_type_name, unique_id))
    return True


def remove_card(cards: list[TradeCard], index: int) -> bool:
    """
    Remove the card at a list position.

    Returns:
        False if the index is out of range
    """
    if not 0 <= index < len(cards):
        return False
    del cards[index]
    return True


def update_quantity(cards: list[TradeCard], index: int, quantity: int) -> bool:
    """
    Set the quantity of the card at a list position.

    The quantity is clamped to 1..MAX_QUANTITY.

    Returns:
        False if the index is out of range
    """
    if not 0 <= index < len(cards):
        return False
    cards[index].quantity = coerce_quantity(quantity)
    return True


def refresh_prices(cards: Iterable[TradeCard], groups: Sequence[CardGroup]) -> list[TradeCard]:
    """
    Re-price cards against a reloaded catalog.

    Cards whose group disappeared are returned unchanged.
    """
    by_name = {group.name: group for group in groups}
    refreshed: list[TradeCard] = []

    for card in cards:
        group = by_name.get(card.name)
        if group is None or not group.editions:
            refreshed.append(card)
            continue

        edition = next(
            (e for e in group.editions if e.sub_type_name == card.sub_type_name),
            group.editions[0],
        )
        refreshed.append(
            replace(
                card,
                price=edition.card_price,
                card_group=group,
                available_editions=group.editions,
            )
        )

    return refreshed


def is_stale(decoded: DecodedTrade, max_age_days: float | None = None) -> bool:
    """True if a shared trade is older than the configured age."""
    if decoded.age_in_days is None:
        return False
    limit = settings.stale_trade_days if max_age_days is None else max_age_days
    return decoded.age_in_days > limit
