"""
API Key authentication for admin endpoints.

Admin routes accept an X-API-Key header checked against the configured keys.
When no keys are configured the check is disabled (development mode).
"""

import logging
from typing import List, Optional

from fastapi import Request

from core.exceptions import AuthError, MSG_INVALID_API_KEY

logger = logging.getLogger(__name__)


def verify_api_key(api_key: Optional[str], valid_keys: List[str]) -> bool:
    """
    Verify if the provided API key is valid.

    Args:
        api_key: API key to verify
        valid_keys: Configured keys

    Returns:
        bool: True if valid, False otherwise
    """
    if not valid_keys:
        return True
    if not api_key:
        return False
    return api_key in valid_keys


async def require_api_key(request: Request) -> None:
    """
    Dependency that requires a valid API key on admin routes.

    Raises:
        AuthError 401: If keys are configured and the header is missing or wrong

    Example:
        @router.post("/event_add", dependencies=[Depends(require_api_key)])
        async def add_event():
            ...
    """
    valid_keys = request.app.state.settings.get_api_keys()
    if not valid_keys:
        return

    api_key = request.headers.get("X-API-Key")
    if not verify_api_key(api_key, valid_keys):
        shown = f"{api_key[:8]}..." if api_key else "none"
        logger.warning(f"Invalid API key for {request.method} {request.url.path}: {shown}")
        raise AuthError(MSG_INVALID_API_KEY, details="Provide a valid X-API-Key header")

    logger.info(f"API key authenticated for {request.method} {request.url.path}")
