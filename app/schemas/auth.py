"""
Authentication schemas for Université Quiz
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SignupRequest(BaseModel):
    """Signup form (French field names are part of the public API)"""
    nom: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    motdepasse: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    """Login form"""
    email: str = Field(..., min_length=1, max_length=255)
    motdepasse: str = Field(..., min_length=1, max_length=128)


class UserPublic(BaseModel):
    """User as exposed to the client"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AuthResponse(BaseModel):
    message: str
    user: UserPublic


class SessionResponse(BaseModel):
    user: UserPublic


class MessageResponse(BaseModel):
    message: str


class Identity(BaseModel):
    """Authenticated caller, as read from a valid access token"""
    id: int
    email: str
