"""
Rate limiting middleware.

This module provides rate limiting for the PIN login endpoint to slow
down PIN guessing. The limiter and its counters are shared by the process;
whether limits apply is decided per application from its own settings.
"""

import logging
from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.config import Settings

logger = logging.getLogger(__name__)

# Initialize limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/minute"],
    storage_uri="memory://",
    strategy="fixed-window"
)


# Rate limit for PIN login attempts per client address
LOGIN_RATE_LIMIT = "30/minute"


def rate_limit_exempt(request: Request) -> bool:
    """True when the application serving the request has rate limiting disabled."""
    return not request.app.state.settings.RATE_LIMIT_ENABLED


def setup_rate_limiting(app, settings: Settings):
    """
    Setup rate limiting for FastAPI app.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    logger.info(f"Rate limiting {'enabled' if settings.RATE_LIMIT_ENABLED else 'disabled'}")
