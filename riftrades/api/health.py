"""
Health check endpoints.

Liveness and readiness probes. Ready means the price guide is loaded, since
every decode needs it to rebuild cards.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from riftrades.api.dependencies import get_catalog_or_none
from riftrades.services.catalog import Catalog

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Probe result, with catalog status on readiness checks."""

    status: str
    catalog: str | None = None
    card_groups: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe; never touches the catalog."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    catalog: Annotated[Catalog | None, Depends(get_catalog_or_none)],
) -> HealthResponse:
    """Readiness probe: 503 until the card catalog can be loaded."""
    if catalog is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", catalog="unavailable")
    return HealthResponse(status="ready", catalog="loaded", card_groups=len(catalog.groups))
