"""
Pydantic models for library members.

Emails are stored lowercase and trimmed; they are unique across
members.  Inactive members keep their history but should not hold
active loans (see the integrity check in ``LibraryApp``).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MemberCreate(BaseModel):
    """Schema for registering a member."""

    name: Optional[str] = Field(None, examples=["Ana Pérez"])
    email: Optional[str] = Field(None, examples=["ana@mail.com"])


class MemberUpdate(BaseModel):
    """Schema for editing a member.  Absent fields are left untouched."""

    name: Optional[str] = None
    email: Optional[str] = None
    active: Optional[bool] = Field(None, description="Deactivate or reactivate the membership")


class MemberRead(BaseModel):
    id: str
    name: str
    email: str
    active: bool = True
    registered_at: datetime

    model_config = {
        "from_attributes": True,
    }
