"""
Security headers middleware for Université Quiz
The API serves JSON and plain text only, so the policy can be strict
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if settings.SECURITY_HEADERS_ENABLED:
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["Referrer-Policy"] = "no-referrer"
            # Swagger UI under /docs loads its assets from a CDN
            if not request.url.path.startswith(("/docs", "/redoc")):
                response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

            if settings.is_production():
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
