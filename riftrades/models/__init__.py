from riftrades.models.card import CardGroup, CatalogCard, Edition, TradeCard
from riftrades.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from riftrades.models.trade import (
    MAX_PRICE,
    MAX_QUANTITY,
    TRADE_FORMAT_VERSION,
    CompactCardEntry,
    DecodedTrade,
    coerce_price,
    coerce_quantity,
)

__all__ = [
    "ApiResponse",
    "CardGroup",
    "CatalogCard",
    "CompactCardEntry",
    "DecodedTrade",
    "Edition",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "MAX_PRICE",
    "MAX_QUANTITY",
    "OutcomeType",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "TRADE_FORMAT_VERSION",
    "TradeCard",
    "coerce_price",
    "coerce_quantity",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
