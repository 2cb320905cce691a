"""
Loan endpoints for API v1.

Checkout is ``POST /loans``; returning a book is
``POST /loans/{loan_id}/return``.  A second return of the same loan
answers 409.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from library_api.app.api.deps import get_library
from library_api.app.schemas.loan import LoanCreate, LoanRead, LoanStatistics
from library_api.app.services.library_app import LibraryApp

router = APIRouter()


@router.get("/active", response_model=List[LoanRead])
async def list_active_loans(library: LibraryApp = Depends(get_library)) -> List[LoanRead]:
    """Active loans, most recent checkout first."""
    return await library.load_active_loans()


@router.get("/history", response_model=List[LoanRead])
async def list_loan_history(library: LibraryApp = Depends(get_library)) -> List[LoanRead]:
    """Returned loans, most recent return first."""
    return await library.load_loan_history()


@router.get("/search", response_model=List[LoanRead])
async def search_loans(
    q: str = Query(..., description="Search in book title or member name"),
    library: LibraryApp = Depends(get_library),
) -> List[LoanRead]:
    return await library.search_loans(q)


@router.get("/statistics", response_model=LoanStatistics)
async def loan_statistics(library: LibraryApp = Depends(get_library)) -> LoanStatistics:
    return await library.loan_statistics()


@router.post("/", response_model=LoanRead, status_code=status.HTTP_201_CREATED)
async def add_loan(loan: LoanCreate, library: LibraryApp = Depends(get_library)) -> LoanRead:
    return await library.add_loan(loan)


@router.post("/{loan_id}/return", response_model=LoanRead)
async def return_loan(loan_id: str, library: LibraryApp = Depends(get_library)) -> LoanRead:
    return await library.return_loan(loan_id)


@router.delete("/{loan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_loan(loan_id: str, library: LibraryApp = Depends(get_library)) -> None:
    await library.delete_loan(loan_id)
    return None
