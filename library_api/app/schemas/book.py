"""
Pydantic models for books.

A book is identified by its title and author pair.  The ``available``
flag is maintained by the loan workflow and cannot be set by clients.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    """Schema for adding a book to the catalogue."""

    title: Optional[str] = Field(None, examples=["Cien años de soledad"])
    author: Optional[str] = Field(None, examples=["Gabriel García Márquez"])


class BookUpdate(BaseModel):
    """Schema for editing a book.

    Only the fields that are present are changed.  Availability is
    managed by checkouts and returns and is not editable.
    """

    title: Optional[str] = Field(None, description="New title")
    author: Optional[str] = Field(None, description="New author")


class BookRead(BaseModel):
    id: str
    title: str
    author: str
    available: bool = True
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
