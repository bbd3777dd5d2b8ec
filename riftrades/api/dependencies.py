"""Shared FastAPI dependencies."""

import logging
from typing import Annotated

from fastapi import Depends, status

from riftrades.models.failure import FailureKind, KnownError
from riftrades.services.catalog import Catalog, get_catalog

logger = logging.getLogger(__name__)


def get_catalog_or_none() -> Catalog | None:
    """The cached catalog, or None when it cannot be loaded."""
    try:
        return get_catalog()
    except (FileNotFoundError, ValueError) as e:
        logger.warning("Card catalog unavailable: %s", e)
        return None


def require_catalog(
    catalog: Annotated[Catalog | None, Depends(get_catalog_or_none)],
) -> Catalog:
    if catalog is None:
        raise KnownError(
            kind=FailureKind.CATALOG_UNAVAILABLE,
            message="Card catalog not available.",
            suggestion="Please try again later.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return catalog
