"""
Contact form schema
"""

from pydantic import BaseModel, EmailStr, Field


class ContactRequest(BaseModel):
    nom: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=5000)
