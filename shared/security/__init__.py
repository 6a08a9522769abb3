from .jwt_handler import Credential, CredentialIssuer
from .api_key import verify_api_key
from .dependencies import get_issuer, get_presented_token, get_app_settings, verify_admin_api_key
from .rate_limiter import ORDER_CREATE_LIMIT, limiter

__all__ = [
    "Credential",
    "CredentialIssuer",
    "verify_api_key",
    "get_issuer",
    "get_presented_token",
    "get_app_settings",
    "verify_admin_api_key",
    "limiter",
    "ORDER_CREATE_LIMIT",
]
