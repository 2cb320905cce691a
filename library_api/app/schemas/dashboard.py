"""
Composite views assembled by ``LibraryApp``.
"""

from typing import List

from pydantic import BaseModel, Field

from .book import BookRead
from .loan import LoanRead, LoanStatistics
from .member import MemberRead


class FullData(BaseModel):
    books: List[BookRead]
    members: List[MemberRead]
    active_loans: List[LoanRead]
    history: List[LoanRead]
    statistics: LoanStatistics


class LoanRefresh(BaseModel):
    active_loans: List[LoanRead]
    history: List[LoanRead]
    available_books: List[BookRead]
    active_members: List[MemberRead]


class IntegrityReport(BaseModel):
    valid: bool
    problems: List[str] = Field(default_factory=list)
