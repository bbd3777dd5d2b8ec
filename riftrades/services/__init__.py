"""
Riftrades services.

Catalog shaping, trade arithmetic and search filtering around the codec.
"""

from riftrades.services.catalog import (
    Catalog,
    build_catalog,
    build_id_lookup,
    create_catalog_card,
    get_catalog,
    group_cards_by_edition,
    is_actual_card,
    load_catalog,
    load_catalog_records,
)
from riftrades.services.search import (
    HighlightSegment,
    SearchOption,
    filter_card_options,
    highlight_match,
)
from riftrades.services.trade import (
    TradeSummary,
    add_card,
    calculate_diff,
    calculate_total,
    create_trade_card,
    is_stale,
    refresh_prices,
    remove_card,
    summarize_trade,
    update_quantity,
)

__all__ = [
    "Catalog",
    "HighlightSegment",
    "SearchOption",
    "TradeSummary",
    "add_card",
    "build_catalog",
    "build_id_lookup",
    "calculate_diff",
    "calculate_total",
    "create_catalog_card",
    "filter_card_options",
    "get_catalog",
    "group_cards_by_edition",
    "highlight_match",
    "is_actual_card",
    "is_stale",
    "load_catalog",
    "load_catalog_records",
    "refresh_prices",
    "remove_card",
    "summarize_trade",
    "update_quantity",
]
