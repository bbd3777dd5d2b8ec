"""
Trade sharing API endpoints.

Builds share URLs for have/want lists and reads them back against the
current catalog. Every endpoint answers with the ApiResponse envelope.
"""

import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, model_validator

from riftrades.api.catalog import EditionResponse
from riftrades.api.dependencies import require_catalog
from riftrades.codec.reconcile import reconstruct_trade
from riftrades.codec.transport import (
    UrlContext,
    build_share_link,
    decode_trade_param,
    estimate_share_url_size,
    read_trade_from_url,
    self_test_round_trip,
)
from riftrades.models.card import TradeCard
from riftrades.models.failure import ApiResponse, FailureKind, KnownError, create_success
from riftrades.models.trade import MAX_PRICE, MAX_QUANTITY
from riftrades.services.catalog import Catalog
from riftrades.services.trade import is_stale, summarize_trade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trades", tags=["trades"])


class TradeCardRequest(BaseModel):
    """A card in a have or want list."""

    name: str = Field(..., min_length=1, examples=["Flame Chompers (12)"])
    price: float = Field(..., ge=0.0, le=MAX_PRICE)
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)
    unique_id: str | None = Field(default=None, examples=["RB000012"])

    def to_trade_card(self) -> TradeCard:
        return TradeCard(
            name=self.name,
            price=self.price,
            quantity=self.quantity,
            unique_id=self.unique_id,
        )


class TradeListsRequest(BaseModel):
    """Both sides of a trade."""

    have: list[TradeCardRequest] = Field(default_factory=list)
    want: list[TradeCardRequest] = Field(default_factory=list)

    def trade_cards(self) -> tuple[list[TradeCard], list[TradeCard]]:
        return (
            [card.to_trade_card() for card in self.have],
            [card.to_trade_card() for card in self.want],
        )


class ShareRequest(TradeListsRequest):
    base_url: str | None = Field(
        default=None,
        description="URL to attach the trade parameter to (defaults to the configured app URL)",
    )


class UrlSizeResponse(BaseModel):
    url_length: int
    json_length: int
    is_large: bool
    is_too_large: bool
    error: str | None = None


class ShareResponse(BaseModel):
    url: str
    size: UrlSizeResponse


class DecodeRequest(BaseModel):
    """A share URL, or the bare trade parameter value."""

    url: str | None = None
    trade: str | None = None

    @model_validator(mode="after")
    def _require_source(self) -> "DecodeRequest":
        if not self.url and not self.trade:
            raise ValueError("Either url or trade must be provided")
        return self


class TradeCardResponse(BaseModel):
    name: str
    price: float
    quantity: int
    unique_id: str | None = None
    sub_type_name: str | None = None
    line_total: float
    editions: list[EditionResponse] = Field(default_factory=list)

    @classmethod
    def from_card(cls, card: TradeCard) -> "TradeCardResponse":
        return cls(
            name=card.name,
            price=card.price,
            quantity=card.quantity,
            unique_id=card.unique_id,
            sub_type_name=card.sub_type_name,
            line_total=card.line_total,
            editions=[EditionResponse.from_edition(e) for e in card.available_editions],
        )


class DroppedEntryResponse(BaseModel):
    identifier: str
    reason: str


class DecodeResponse(BaseModel):
    """A shared trade rebuilt against the current catalog."""

    version: int
    timestamp_ms: int | None = None
    age_in_days: float | None = None
    is_stale: bool = False
    have: list[TradeCardResponse] = Field(default_factory=list)
    want: list[TradeCardResponse] = Field(default_factory=list)
    have_total: float = 0.0
    want_total: float = 0.0
    difference: float = 0.0
    dropped: list[DroppedEntryResponse] = Field(default_factory=list)


class SelfTestResponse(BaseModel):
    success: bool
    url_length: int
    original_have: int
    original_want: int
    decoded_have: int
    decoded_want: int
    trade_param_preview: str | None = None
    error: str | None = None


@router.post("/share", response_model=ApiResponse[ShareResponse])
async def share_trade(request: ShareRequest) -> ApiResponse[Any]:
    """Build a share URL for a trade."""
    have, want = request.trade_cards()
    link = build_share_link(have, want, base_url=request.base_url)
    if link is None:
        raise KnownError(
            kind=FailureKind.ENCODING_FAILED,
            message="The trade could not be encoded into a link.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return create_success(
        ShareResponse(
            url=link.url,
            size=UrlSizeResponse(
                url_length=link.size.url_length,
                json_length=link.size.json_length,
                is_large=link.size.is_large,
                is_too_large=link.size.is_too_large,
            ),
        )
    )


@router.post("/decode", response_model=ApiResponse[DecodeResponse])
async def decode_trade(
    request: DecodeRequest,
    catalog: Annotated[Catalog, Depends(require_catalog)],
) -> ApiResponse[Any]:
    """
    Read a shared trade and rebuild it against the current catalog.

    Entries that no longer match any card are dropped and listed in
    ``dropped``; the totals cover the remaining cards.
    """
    if request.url:
        decoded = read_trade_from_url(UrlContext(current_url=request.url))
    else:
        decoded = decode_trade_param(request.trade, time.time())

    if decoded is None:
        raise KnownError(
            kind=FailureKind.DECODING_FAILED,
            message="The trade link could not be read.",
            detail="Malformed payload or unsupported version",
            suggestion="Ask the sender for a fresh link.",
        )

    rebuilt = reconstruct_trade(decoded, catalog.groups, catalog.id_lookup)
    summary = summarize_trade(rebuilt.have, rebuilt.want)
    stale = is_stale(decoded)
    if stale:
        logger.warning("Trade data is %d days old", round(decoded.age_in_days or 0))

    return create_success(
        DecodeResponse(
            version=decoded.version,
            timestamp_ms=decoded.timestamp_ms,
            age_in_days=decoded.age_in_days,
            is_stale=stale,
            have=[TradeCardResponse.from_card(card) for card in rebuilt.have],
            want=[TradeCardResponse.from_card(card) for card in rebuilt.want],
            have_total=summary.have_total,
            want_total=summary.want_total,
            difference=summary.difference,
            dropped=[
                DroppedEntryResponse(identifier=miss.identifier, reason=miss.reason)
                for miss in rebuilt.dropped
            ],
        )
    )


@router.post("/size", response_model=ApiResponse[UrlSizeResponse])
async def trade_size(request: TradeListsRequest) -> ApiResponse[Any]:
    """Report how long the share URL for a trade would be."""
    have, want = request.trade_cards()
    size = estimate_share_url_size(have, want)
    return create_success(
        UrlSizeResponse(
            url_length=size.url_length,
            json_length=size.json_length,
            is_large=size.is_large,
            is_too_large=size.is_too_large,
            error=size.error,
        )
    )


@router.post("/self-test", response_model=ApiResponse[SelfTestResponse])
async def trade_self_test(request: TradeListsRequest) -> ApiResponse[Any]:
    """Encode a trade and decode it straight back before offering the link."""
    have, want = request.trade_cards()
    report = self_test_round_trip(have, want)
    return create_success(
        SelfTestResponse(
            success=report.success,
            url_length=report.url_length,
            original_have=report.original_have,
            original_want=report.original_want,
            decoded_have=report.decoded_have,
            decoded_want=report.decoded_want,
            trade_param_preview=report.trade_param_preview,
            error=report.error,
        )
    )
