"""
Card and Catalog Models.

The catalog side (Edition, CardGroup, CatalogCard) is read-only reference
data rebuilt on every catalog load. TradeCard is the mutable, user-facing
entry in a have/want list.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Edition:
    """
    One priced, purchasable variant of a card.

    Attributes:
        sub_type_name: Foil/variant tag (e.g., "Normal", "Foil")
        product_id: Marketplace product identifier
        card_price: Price under the active price type
        unique_id: Stable identifier assigned during consolidation
    """

    sub_type_name: str
    product_id: str
    card_price: float
    unique_id: str


@dataclass(frozen=True, slots=True)
class CardGroup:
    """
    All editions sharing a display name.

    The display name is the unique key of a group within one catalog.
    """

    name: str
    editions: tuple[Edition, ...] = ()


@dataclass(frozen=True, slots=True)
class CatalogCard:
    """A single consolidated price record shaped for the app."""

    unique_id: str
    product_id: str
    name: str
    display_name: str
    sub_type_name: str = ""
    clean_name: str = ""
    rarity: str = ""
    number: str = ""
    image_url: str = ""
    market_price: float = 0.0
    low_price: float = 0.0
    mid_price: float = 0.0
    high_price: float = 0.0
    direct_low_price: float = 0.0
    set_number: int = 0


@dataclass
class TradeCard:
    """
    A card placed in a have or want list.

    Attributes:
        name: Display name (matches a CardGroup name when reconstructed)
        price: Unit price used for totals
        quantity: Number of copies, at least 1
        card_group: Group the card was picked from, if known
        available_editions: Editions the user can switch between
        unique_id: Unique id of the chosen edition, if known
        sub_type_name: Variant tag of the chosen edition, if known
    """

    name: str
    price: float
    quantity: int = 1
    card_group: CardGroup | None = None
    available_editions: tuple[Edition, ...] = field(default_factory=tuple)
    unique_id: str | None = None
    sub_type_name: str | None = None

    @property
    def line_total(self) -> float:
        """Price times quantity."""
        return self.price * self.quantity
