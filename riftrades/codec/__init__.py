"""
Trade-sharing URL codec.

Serializes have/want lists into a compact versioned record, compresses it
into a URL parameter, and reconciles decoded entries with the live catalog.
"""

from riftrades.codec.compression import (
    SUBSTITUTIONS,
    DecodeFailure,
    DecodeResult,
    DecodeSuccess,
    compress,
    decompress,
)
from riftrades.codec.reconcile import (
    MatchStrategy,
    RankedMatch,
    ReconciliationMiss,
    ReconstructedTrade,
    find_best_match,
    match_candidates,
    normalize_card_name,
    reconstruct_cards,
    reconstruct_trade,
    select_edition,
)
from riftrades.codec.serializer import deserialize, serialize, to_json
from riftrades.codec.transport import (
    TRADE_PARAM,
    RoundTripReport,
    ShareLink,
    UrlContext,
    UrlSizeEstimate,
    build_share_link,
    build_share_url,
    clear_trade_parameter,
    decode_trade_param,
    estimate_share_url_size,
    has_trade_parameter,
    read_trade_from_url,
    self_test_round_trip,
)

__all__ = [
    "SUBSTITUTIONS",
    "TRADE_PARAM",
    "DecodeFailure",
    "DecodeResult",
    "DecodeSuccess",
    "MatchStrategy",
    "RankedMatch",
    "ReconciliationMiss",
    "ReconstructedTrade",
    "RoundTripReport",
    "ShareLink",
    "UrlContext",
    "UrlSizeEstimate",
    "build_share_link",
    "build_share_url",
    "clear_trade_parameter",
    "compress",
    "decode_trade_param",
    "decompress",
    "deserialize",
    "estimate_share_url_size",
    "find_best_match",
    "has_trade_parameter",
    "match_candidates",
    "normalize_card_name",
    "read_trade_from_url",
    "reconstruct_cards",
    "reconstruct_trade",
    "select_edition",
    "self_test_round_trip",
    "serialize",
    "to_json",
]
