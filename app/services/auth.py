"""
Authentication service for Université Quiz
Signup, login, session validation, refresh token rotation and logout
"""

import logging
from datetime import timedelta
from typing import NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationException, ConflictException, WeakPasswordException
from app.core.logging import LoggerFactory
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    SecurityUtils,
    check_password_strength,
    normalize_email,
    utcnow,
)
from app.models.user import RefreshToken, User
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)
security_logger = LoggerFactory.get_security_logger()

INVALID_CREDENTIALS = "Identifiants invalides."


class IssuedSession(NamedTuple):
    """Tokens handed to the client as cookies, never in the response body"""
    user: User
    access_token: str
    refresh_token: str


class SessionManager:
    """Session lifecycle: anonymous -> active -> refreshable -> active | anonymous"""

    def signup(self, db: Session, name: str, email: str, password: str) -> User:
        """
        Create a new account

        Raises:
            WeakPasswordException: every violated password rule, at once
            ConflictException: the normalised email is already registered
        """
        email = normalize_email(email)
        name = name.strip()

        issues = check_password_strength(password, email=email, name=name)
        if issues:
            raise WeakPasswordException(issues)

        if db.query(User.id).filter(User.email == email).first():
            raise ConflictException("Email déjà utilisé.")

        user = User(name=name, email=email, password_hash=SecurityUtils.get_password_hash(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent signup with the same email
            db.rollback()
            raise ConflictException("Email déjà utilisé.")
        db.refresh(user)

        security_logger.info("User signed up", extra={"user_id": user.id})
        return user

    def login(self, db: Session, email: str, password: str) -> IssuedSession:
        """
        Authenticate and open a session

        Unknown email and wrong password fail identically, including the bcrypt
        work spent on the check.
        """
        email = normalize_email(email)
        user = db.query(User).filter(User.email == email).first()

        if user is None:
            SecurityUtils.burn_password_check(password)
            security_logger.warning("Login failed", extra={"reason": "credentials"})
            raise AuthenticationException(INVALID_CREDENTIALS, error_code="INVALID_CREDENTIALS")

        if not SecurityUtils.verify_password(password, user.password_hash):
            security_logger.warning("Login failed", extra={"reason": "credentials"})
            raise AuthenticationException(INVALID_CREDENTIALS, error_code="INVALID_CREDENTIALS")

        refresh_token = self._store_refresh_token(db, user.id)
        db.commit()

        security_logger.info("User logged in", extra={"user_id": user.id})
        return IssuedSession(
            user=user,
            access_token=SecurityUtils.create_access_token(user.id, user.email),
            refresh_token=refresh_token,
        )

    def validate_session(self, access_token: Optional[str]) -> Identity:
        """Read the caller's identity from an access token; any defect is the same 401"""
        if not access_token:
            raise AuthenticationException()

        payload = SecurityUtils.decode_token(
            access_token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE
        )
        if payload is None:
            raise AuthenticationException()

        return Identity(id=int(payload["sub"]), email=payload.get("email", ""))

    def refresh(self, db: Session, refresh_token: Optional[str]) -> IssuedSession:
        """
        Rotate a refresh token

        The presented token is consumed: exactly one caller can delete its row,
        and the replacement is inserted in the same transaction.
        """
        if not refresh_token:
            raise AuthenticationException()

        payload = SecurityUtils.decode_token(
            refresh_token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE
        )
        if payload is None:
            raise AuthenticationException()

        stored = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
        if stored is None or stored.user_id != int(payload["sub"]):
            raise AuthenticationException()

        if stored.expires_at <= utcnow():
            db.delete(stored)
            db.commit()
            raise AuthenticationException()

        user = db.get(User, stored.user_id)
        if user is None:
            raise AuthenticationException()

        consumed = (
            db.query(RefreshToken)
            .filter(RefreshToken.id == stored.id)
            .delete(synchronize_session=False)
        )
        if consumed != 1:
            db.rollback()
            security_logger.warning("Refresh token reused", extra={"user_id": user.id})
            raise AuthenticationException()
        db.expunge(stored)

        new_refresh_token = self._store_refresh_token(db, user.id)
        db.commit()

        return IssuedSession(
            user=user,
            access_token=SecurityUtils.create_access_token(user.id, user.email),
            refresh_token=new_refresh_token,
        )

    def logout(self, db: Session, refresh_token: Optional[str]) -> None:
        """Forget the refresh token if it is stored; calling twice is harmless"""
        if not refresh_token:
            return
        db.query(RefreshToken).filter(RefreshToken.token == refresh_token).delete(
            synchronize_session=False
        )
        db.commit()

    def get_user(self, db: Session, identity: Identity) -> User:
        """Load the account behind a valid access token"""
        user = db.get(User, identity.id)
        if user is None:
            raise AuthenticationException()
        return user

    @staticmethod
    def _store_refresh_token(db: Session, user_id: int) -> str:
        token = SecurityUtils.create_refresh_token(user_id)
        db.add(
            RefreshToken(
                token=token,
                user_id=user_id,
                expires_at=utcnow() + timedelta(days=settings.REFRESH_TOKEN_TTL_DAYS),
            )
        )
        return token


session_manager = SessionManager()
