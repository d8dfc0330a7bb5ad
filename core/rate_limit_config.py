"""
Rate limits for the Shared Task Lists API.

Limits are slowapi limit strings and can be overridden per deployment:
  REGISTER_RATE_LIMIT  account creation, keyed by IP
  LOGIN_RATE_LIMIT     credential checks, keyed by IP
  SHARE_RATE_LIMIT     share grants, keyed by the owner's user id
  DEFAULT_RATE_LIMIT   everything else
"""

import logging
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

TESTING = os.getenv("TESTING", "false").lower() == "true"
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")

REGISTER_LIMIT = os.getenv("REGISTER_RATE_LIMIT", "10/hour")
LOGIN_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5/minute")
SHARE_LIMIT = os.getenv("SHARE_RATE_LIMIT", "60/hour")
DEFAULT_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "1000/hour")


def rate_limit_key(request: Request) -> str:
    """Authenticated callers count per account; register and login count per IP"""
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user_{user.id}"
    return f"ip_{get_remote_address(request)}"


def build_limiter(testing: bool = TESTING, storage_uri: str = REDIS_URL) -> Limiter:
    if testing:
        logger.info("Rate limiting DISABLED for testing")
        return Limiter(key_func=rate_limit_key, enabled=False)

    # Counters live in Redis so every worker shares the same window
    logger.info(f"Rate limiting ENABLED with storage: {storage_uri}")
    return Limiter(
        key_func=rate_limit_key,
        default_limits=[DEFAULT_LIMIT],
        storage_uri=storage_uri,
        strategy="fixed-window",
    )


limiter = build_limiter()
