"""
Rate limiting for FastAPI routes.

Counters live in the storage named by `settings.rate_limit_storage_uri`
("memory://" for a single process, a redis:// URI when several workers or
nodes share the limit).
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from orgcms.config import settings
from orgcms.exception_handlers import create_error_response
from orgcms.exceptions import ErrorCode

# Create rate limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    headers_enabled=False,
)


def get_rate_limiter():
    """Get the rate limiter instance."""
    return limiter


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Render slowapi's RateLimitExceeded in the standard error envelope."""
    return create_error_response(
        status_code=429,
        message=f"Rate limit exceeded: {exc.detail}",
        error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
        path=request.url.path,
    )


def configure_rate_limiting(app):
    """
    Configure rate limiting for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
