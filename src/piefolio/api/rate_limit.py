"""FastAPI dependencies that apply the rate limiters to routes."""

import logging
import math

from fastapi import Depends, HTTPException, Request, Response

from piefolio.api.deps import get_api_limiter, get_auth_limiter
from piefolio.config.settings import get_settings
from piefolio.domain.models import RateLimitResult
from piefolio.services import RateLimiter, UNKNOWN_CLIENT, resolve_client_identity

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests"


def _limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
    }


def _enforce(limiter: RateLimiter, request: Request, response: Response) -> RateLimitResult:
    client_id = resolve_client_identity(request.headers)
    if client_id == UNKNOWN_CLIENT and get_settings().unresolved_client_policy == "reject":
        logger.info("Rejecting request without client identity limiter=%s", limiter.name)
        raise HTTPException(status_code=400, detail="Client identity could not be determined")

    result = limiter.check(client_id)
    if not result.allowed:
        headers = _limit_headers(result)
        headers["Retry-After"] = str(max(1, math.ceil(result.retry_after_seconds)))
        raise HTTPException(status_code=429, detail=TOO_MANY_REQUESTS, headers=headers)

    response.headers.update(_limit_headers(result))
    return result


def api_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_api_limiter),
) -> RateLimitResult:
    """General limiter applied to every API route."""
    return _enforce(limiter, request, response)


def auth_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_auth_limiter),
) -> RateLimitResult:
    """Stricter limiter for settings writes."""
    return _enforce(limiter, request, response)
