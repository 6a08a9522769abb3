"""
Operator key for the admin listing.

The listing used to be reachable by anyone. Now an empty ADMIN_API_KEY means
"nobody gets in" rather than "everybody gets in", with a loud warning so the
misconfiguration is visible instead of silently accepted.
"""
import secrets

import structlog

logger = structlog.get_logger(__name__)


def warn_if_admin_key_missing(admin_api_key: str) -> None:
    if not admin_api_key:
        logger.warning(
            "admin_api_key_missing",
            detail="ADMIN_API_KEY is not set. /admin/orders will reject every request.",
        )


def verify_api_key(provided_key: str | None, expected_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key or not expected_key:
        return False
    return secrets.compare_digest(str(provided_key), str(expected_key))
