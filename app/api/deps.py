"""
Shared API dependencies: caller identity and admin token checks
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.exceptions import InvalidAdminTokenException
from app.core.logging import LoggerFactory
from app.schemas.auth import Identity
from app.services.admin_tokens import AdminTokenStore
from app.services.auth import session_manager

admin_bearer = HTTPBearer(auto_error=False)
security_logger = LoggerFactory.get_security_logger()


def get_current_identity(request: Request) -> Identity:
    """Identity from the access cookie; 401 when missing, invalid or expired"""
    return session_manager.validate_session(request.cookies.get(settings.ACCESS_COOKIE_NAME))


def get_admin_token_store(request: Request) -> AdminTokenStore:
    return request.app.state.admin_tokens


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(admin_bearer),
    store: AdminTokenStore = Depends(get_admin_token_store),
) -> str:
    """Admin bearer token check; a valid token has its expiry extended"""
    token = credentials.credentials if credentials else None
    if not token or not store.verify(token):
        security_logger.warning("Admin token rejected")
        raise InvalidAdminTokenException()
    return token
