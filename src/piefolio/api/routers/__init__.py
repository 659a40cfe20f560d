"""API routers package."""

from piefolio.api.routers.portfolio import router as portfolio_router
from piefolio.api.routers.allocations import router as allocations_router
from piefolio.api.routers.settings import router as settings_router

__all__ = [
    "portfolio_router",
    "allocations_router",
    "settings_router",
]
