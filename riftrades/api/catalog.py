"""
Catalog API endpoints.

Search over card groups for the have/want search boxes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from riftrades.api.dependencies import require_catalog
from riftrades.models.card import Edition
from riftrades.services.catalog import Catalog
from riftrades.services.search import SearchOption, filter_card_options, highlight_match

router = APIRouter(prefix="/catalog", tags=["catalog"])


class EditionResponse(BaseModel):
    """One purchasable variant of a card."""

    sub_type_name: str
    product_id: str
    card_price: float
    unique_id: str

    @classmethod
    def from_edition(cls, edition: Edition) -> "EditionResponse":
        return cls(
            sub_type_name=edition.sub_type_name,
            product_id=edition.product_id,
            card_price=edition.card_price,
            unique_id=edition.unique_id,
        )


class HighlightSegmentResponse(BaseModel):
    text: str
    highlight: bool


class SearchResultResponse(BaseModel):
    """A card group matching the search term."""

    label: str
    segments: list[HighlightSegmentResponse] = Field(default_factory=list)
    editions: list[EditionResponse] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResultResponse] = Field(default_factory=list)


@router.get("/search", response_model=SearchResponse)
async def search_catalog(
    catalog: Annotated[Catalog, Depends(require_catalog)],
    q: Annotated[str, Query(max_length=100)] = "",
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
) -> SearchResponse:
    """
    Search card groups by name.

    Exact matches rank first, then prefix matches, then the rest
    alphabetically. An empty query returns the first groups in catalog order.
    """
    options = [SearchOption(label=group.name, card=group) for group in catalog.groups]
    matches = filter_card_options(options, q, limit=limit)

    return SearchResponse(
        query=q,
        results=[
            SearchResultResponse(
                label=option.label,
                segments=[
                    HighlightSegmentResponse(text=s.text, highlight=s.highlight)
                    for s in highlight_match(option.label, q)
                ],
                editions=[EditionResponse.from_edition(e) for e in option.card.editions],
            )
            for option in matches
        ],
    )
