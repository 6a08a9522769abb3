from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from shared.config.settings import Settings

from .api_key import verify_api_key
from .jwt_handler import CredentialIssuer

# Defines the expected header format (Bearer <token>)
bearer_scheme = HTTPBearer(auto_error=False)

# Operator header for the admin listing
admin_key_header = APIKeyHeader(name="X-Admin-API-Key", auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_issuer(request: Request) -> CredentialIssuer:
    return request.app.state.issuer


async def get_presented_token(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Optional[str]:
    """Raw credential from the Authorization header, else from the session cookie."""
    if bearer and bearer.credentials:
        return bearer.credentials
    return request.cookies.get(settings.paid_cookie_name) or None


async def verify_admin_api_key(
    api_key: Optional[str] = Depends(admin_key_header),
    settings: Settings = Depends(get_app_settings),
) -> bool:
    """Dependency guarding the operator-only endpoints."""
    if not verify_api_key(api_key, settings.admin_api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing X-Admin-API-Key header",
        )
    return True
