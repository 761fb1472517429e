"""Pydantic schemas for notes and note sharing.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = ""


class NoteUpdate(BaseModel):
    """Full or partial update. Only fields present in the body are written."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def reject_null(cls, v: Optional[str]) -> str:
        # Omit a field to leave it unchanged; null is not a value.
        if v is None:
            raise ValueError("must not be null")
        return v


class NoteRead(BaseModel):
    id: int
    owner_id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ShareRequest(BaseModel):
    shared_with_identity_id: int = Field(..., gt=0)


class MessageResponse(BaseModel):
    message: str
