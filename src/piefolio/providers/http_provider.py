"""HTTP client for the upstream portfolio API."""

import logging
from decimal import Decimal
from typing import Any, Optional

import httpx

from piefolio.core.exceptions import UpstreamError, UpstreamFormatError

logger = logging.getLogger(__name__)

PORTFOLIO_PATH = "/v1/portfolio"


class HttpPortfolioProvider:
    """
    Portfolio provider backed by the upstream HTTP JSON service.

    One request per call; failures surface as UpstreamError so the caller
    decides whether to serve a stale snapshot.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = api_key
        self._client = client or httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 2.0)),
        )

    def fetch_portfolio(self, country: str, currency: str, budget: Decimal) -> dict[str, Any]:
        """Fetch the raw portfolio document."""
        params = {"country": country, "currency": currency, "budget": str(budget)}
        try:
            response = self._client.get(PORTFOLIO_PATH, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Upstream portfolio request failed: %s", exc.__class__.__name__)
            raise UpstreamError(f"Upstream portfolio request failed: {exc}") from exc

        if not response.is_success:
            logger.warning("Upstream portfolio request returned status=%s", response.status_code)
            raise UpstreamError(
                f"Upstream portfolio API returned {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamFormatError("Upstream portfolio response is not valid JSON") from exc

        if not isinstance(body, dict):
            raise UpstreamFormatError("Upstream portfolio response is not a JSON object")
        return body

    def close(self) -> None:
        self._client.close()
