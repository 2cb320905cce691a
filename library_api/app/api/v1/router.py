"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers (books, members, loans,
dashboard, notifications) under a unified prefix.
"""

from fastapi import APIRouter

from .endpoints import books, dashboard, loans, members, notifications

router = APIRouter()

router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(members.router, prefix="/members", tags=["members"])
router.include_router(loans.router, prefix="/loans", tags=["loans"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
