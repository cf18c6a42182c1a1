import hmac

import structlog
from fastapi import Header, HTTPException

from portfolio_api.core.config import settings

logger = structlog.get_logger(__name__)


async def verify_api_key(x_api_key: str | None = Header(None)) -> bool:
    """
    Verify X-API-Key for the public v1 endpoints.

    In local dev, this is skipped if no key is configured.
    In production, this must match API_KEY.
    """
    if not settings.API_KEY:
        logger.debug("auth.api_key_skipped", reason="not_configured")
        return True

    if not x_api_key:
        logger.warning("auth.api_key_missing")
        raise HTTPException(status_code=401, detail="Missing X-API-Key header")

    # compare_digest only accepts ASCII str, so compare bytes.
    if not hmac.compare_digest(x_api_key.encode(), settings.API_KEY.encode()):
        logger.warning("auth.api_key_invalid")
        raise HTTPException(status_code=401, detail="Invalid API key")

    logger.debug("auth.api_key_verified")
    return True
