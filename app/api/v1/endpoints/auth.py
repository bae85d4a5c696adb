"""
Authentication endpoints
Tokens travel only as HTTP-only cookies
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.config import settings
from app.core.database import get_db
from app.middleware.rate_limit import auth_limit, limiter
from app.schemas.auth import (
    AuthResponse,
    Identity,
    LoginRequest,
    MessageResponse,
    SessionResponse,
    SignupRequest,
    UserPublic,
)
from app.services.auth import IssuedSession, session_manager

router = APIRouter()


def set_auth_cookies(response: Response, issued: IssuedSession) -> None:
    cookie_options = {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
        "path": "/",
    }
    response.set_cookie(
        settings.ACCESS_COOKIE_NAME,
        issued.access_token,
        max_age=settings.ACCESS_TOKEN_TTL_MIN * 60,
        **cookie_options,
    )
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        issued.refresh_token,
        max_age=settings.REFRESH_TOKEN_TTL_DAYS * 24 * 3600,
        **cookie_options,
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME):
        response.delete_cookie(
            name,
            path="/",
            secure=settings.COOKIE_SECURE,
            httponly=True,
            samesite=settings.COOKIE_SAMESITE,
        )


@router.post("/inscription", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_limit)
def inscription(request: Request, payload: SignupRequest, db: Session = Depends(get_db)):
    """Create an account; the client logs in afterwards"""
    user = session_manager.signup(db, payload.nom, payload.email, payload.motdepasse)
    return AuthResponse(message="Inscription réussie.", user=UserPublic.model_validate(user))


@router.post("/connexion", response_model=AuthResponse)
@limiter.limit(auth_limit)
def connexion(
    request: Request, response: Response, payload: LoginRequest, db: Session = Depends(get_db)
):
    """Login; sets the access and refresh cookies"""
    issued = session_manager.login(db, payload.email, payload.motdepasse)
    set_auth_cookies(response, issued)
    return AuthResponse(message="Connexion réussie.", user=UserPublic.model_validate(issued.user))


@router.post("/refresh", response_model=AuthResponse)
@limiter.limit(auth_limit)
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    """Rotate the refresh cookie and issue a new access cookie"""
    issued = session_manager.refresh(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    set_auth_cookies(response, issued)
    return AuthResponse(message="Session renouvelée.", user=UserPublic.model_validate(issued.user))


@router.get("/session", response_model=SessionResponse)
def session(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Current user, from the access cookie"""
    user = session_manager.get_user(db, identity)
    return SessionResponse(user=UserPublic.model_validate(user))


@router.post("/deconnexion", response_model=MessageResponse)
def deconnexion(
    request: Request,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Logout; clears both cookies and deletes the refresh token row"""
    session_manager.logout(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    clear_auth_cookies(response)
    return MessageResponse(message="Déconnecté.")
