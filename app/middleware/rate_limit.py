"""
Rate limiting for Université Quiz
Per-IP limits on the authentication and quiz endpoints
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.exceptions import create_error_response

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

auth_limit = settings.RATE_LIMIT_AUTH
quiz_limit = settings.RATE_LIMIT_QUIZ


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "client": get_remote_address(request), "limit": str(exc.detail)},
    )
    return create_error_response(
        request=request,
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        error_code="RATE_LIMITED",
        message="Trop de requêtes, réessayez plus tard.",
    )


def add_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter to the application"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
