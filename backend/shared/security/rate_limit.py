"""
Rate limiting with slowapi, keyed by client IP.
The order endpoint is reachable by anyone holding a table QR code.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with the window length, in seconds, as Retry-After."""
    retry_after = exc.limit.limit.get_expiry()
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.limit.limit),
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many requests, limit is {exc.limit.limit}",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
