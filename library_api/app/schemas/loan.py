"""
Pydantic models for loans.

A loan copies the title/author of the book and the name/email of the
member at checkout time, so listings do not need extra lookups.  It is
created ``active`` and moves to ``returned`` exactly once.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LoanStatus(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"


class LoanCreate(BaseModel):
    """Schema for checking out a book."""

    book_id: Optional[str] = Field(None, examples=["b1c2d3"])
    member_id: Optional[str] = Field(None, examples=["m1n2o3"])


class LoanDocument(BaseModel):
    """Loan as written to the store at checkout."""

    book_id: str
    member_id: str
    book_title: str
    book_author: str
    member_name: str
    member_email: str
    loaned_at: datetime
    returned_at: Optional[datetime] = None
    status: LoanStatus = LoanStatus.ACTIVE


class LoanRead(LoanDocument):
    id: str

    model_config = {
        "from_attributes": True,
    }

    @property
    def is_active(self) -> bool:
        return self.returned_at is None


class LoanStatistics(BaseModel):
    """Aggregated loan counters, serialized with the dashboard's keys."""

    active_loans: int = Field(0, serialization_alias="prestamosActivos")
    total_loans: int = Field(0, serialization_alias="totalPrestamos")
    overdue_loans: int = Field(0, serialization_alias="prestamosVencidos")
