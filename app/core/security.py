"""
Security utilities for authentication
Handles password hashing, the signup password policy and JWT tokens
"""

import re
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_EMAIL_SPLIT = re.compile(r"[@._-]")
_OBVIOUS_SEQUENCES = re.compile(r"0123|1234|abcd|qwerty|password", re.IGNORECASE)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def check_password_strength(password: str, email: str = "", name: str = "") -> List[str]:
    """
    Check a signup password against the policy

    Args:
        password: Candidate password
        email: Account email; its parts may not appear in the password
        name: Display name; its words may not appear in the password

    Returns:
        Every violated rule, in a stable order (empty when the password is acceptable)
    """
    issues = []
    if len(password) < 8:
        issues.append("8 caractères min.")
    if not re.search(r"[a-z]", password):
        issues.append("Minuscule.")
    if not re.search(r"[A-Z]", password):
        issues.append("Majuscule.")
    if not re.search(r"[0-9]", password):
        issues.append("Chiffre.")
    if not re.search(r"[^\w\s]", password):
        issues.append("Symbole.")

    parts = (_EMAIL_SPLIT.split(email) if email else []) + (name.split() if name else [])
    lowered = password.lower()
    if any(len(part) >= 3 and part.lower() in lowered for part in parts):
        issues.append("Pas nom/email.")

    if _OBVIOUS_SEQUENCES.search(password):
        issues.append("Évitez séquences évidentes.")

    return issues


class SecurityUtils:
    """Security utility functions"""

    _dummy_hash: Optional[str] = None

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against hashed password"""
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password using bcrypt"""
        return pwd_context.hash(password)

    @classmethod
    def burn_password_check(cls, password: str) -> None:
        """Spend the same bcrypt work as a real check, for unknown accounts"""
        if cls._dummy_hash is None:
            cls._dummy_hash = pwd_context.hash(secrets.token_urlsafe(16))
        pwd_context.verify(password, cls._dummy_hash)

    @staticmethod
    def create_access_token(
        user_id: int, email: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token

        Args:
            user_id: Identity claim (`sub`)
            email: Email claim
            expires_delta: Token lifetime, defaults to ACCESS_TOKEN_TTL_MIN

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_TTL_MIN))
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, settings.JWT_ACCESS_SECRET, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_refresh_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create JWT refresh token

        A random `jti` keeps every issued refresh token unique, even when two are
        minted for the same user within the same second.
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_TTL_DAYS))
        to_encode = {
            "sub": str(user_id),
            "type": REFRESH_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str, secret: str, expected_type: str) -> Optional[Dict[str, Any]]:
        """
        Decode and verify a JWT token

        Returns:
            The payload, or None when the signature, expiry, type or subject is wrong
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None

        if payload.get("type") != expected_type:
            return None
        sub = payload.get("sub")
        if sub is None or not str(sub).isdigit():
            return None
        return payload

    @staticmethod
    def generate_admin_token() -> str:
        """Generate an opaque admin session token (32 random bytes)"""
        return secrets.token_urlsafe(32)
