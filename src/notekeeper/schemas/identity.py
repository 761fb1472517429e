"""Pydantic schemas for identities."""

from datetime import datetime

from pydantic import BaseModel, Field


class IdentityCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=128)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8)


class IdentityPublic(BaseModel):
    """Public projection, as returned by search and share listings."""
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class IdentityRead(IdentityPublic):
    created_at: datetime
