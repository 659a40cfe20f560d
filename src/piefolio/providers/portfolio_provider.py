"""Upstream portfolio provider protocol."""

from decimal import Decimal
from typing import Any, Protocol


class PortfolioProvider(Protocol):
    """
    Protocol for upstream portfolio sources.

    Implementations return the decoded JSON body of
    ``GET /v1/portfolio?country=&currency=&budget=`` and raise
    UpstreamError (or UpstreamFormatError for undecodable bodies) instead
    of returning partial data. They never retry.
    """

    def fetch_portfolio(self, country: str, currency: str, budget: Decimal) -> dict[str, Any]:
        """Fetch the raw portfolio document for the given request inputs."""
        ...
