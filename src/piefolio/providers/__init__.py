"""Upstream portfolio providers."""

from piefolio.providers.portfolio_provider import PortfolioProvider
from piefolio.providers.http_provider import HttpPortfolioProvider
from piefolio.providers.stub_provider import StubPortfolioProvider

__all__ = [
    "PortfolioProvider",
    "HttpPortfolioProvider",
    "StubPortfolioProvider",
]
