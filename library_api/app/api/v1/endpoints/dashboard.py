"""
Dashboard endpoints for API v1.

These return the composite views assembled by ``LibraryApp`` from
concurrent reads.
"""

from fastapi import APIRouter, Depends

from library_api.app.api.deps import get_library
from library_api.app.schemas.dashboard import FullData, IntegrityReport, LoanRefresh
from library_api.app.services.library_app import LibraryApp

router = APIRouter()


@router.get("/", response_model=FullData)
async def full_data(library: LibraryApp = Depends(get_library)) -> FullData:
    return await library.get_full_data()


@router.get("/loans", response_model=LoanRefresh)
async def refresh_loans(library: LibraryApp = Depends(get_library)) -> LoanRefresh:
    return await library.refresh_loan_data()


@router.get("/integrity", response_model=IntegrityReport)
async def integrity(library: LibraryApp = Depends(get_library)) -> IntegrityReport:
    return await library.validate_integrity()
