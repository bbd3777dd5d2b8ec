from riftrades.api.catalog import router as catalog_router
from riftrades.api.health import router as health_router
from riftrades.api.trades import router as trades_router

__all__ = [
    "catalog_router",
    "health_router",
    "trades_router",
]
