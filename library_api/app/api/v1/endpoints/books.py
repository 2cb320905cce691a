"""
Book endpoints for API v1.

Errors raised by the services are turned into JSON responses by the
handler registered in ``main.create_app``; the message reaches the
client verbatim in ``detail``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from library_api.app.api.deps import get_library
from library_api.app.schemas.book import BookCreate, BookRead, BookUpdate
from library_api.app.services.library_app import LibraryApp

router = APIRouter()


@router.get("/", response_model=List[BookRead])
async def list_books(
    q: Optional[str] = Query(None, description="Search in title or author"),
    library: LibraryApp = Depends(get_library),
) -> List[BookRead]:
    """List the catalogue sorted by title, optionally filtered by ``q``."""
    if q:
        return await library.search_books(q)
    return await library.load_books()


@router.get("/available", response_model=List[BookRead])
async def list_available_books(library: LibraryApp = Depends(get_library)) -> List[BookRead]:
    return await library.available_books()


@router.post("/", response_model=BookRead, status_code=status.HTTP_201_CREATED)
async def add_book(book: BookCreate, library: LibraryApp = Depends(get_library)) -> BookRead:
    return await library.add_book(book)


@router.put("/{book_id}", response_model=BookRead)
async def edit_book(
    book_id: str,
    changes: BookUpdate,
    library: LibraryApp = Depends(get_library),
) -> BookRead:
    return await library.edit_book(book_id, changes)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: str, library: LibraryApp = Depends(get_library)) -> None:
    """Delete a book.  Refused while the book is on loan."""
    await library.delete_book(book_id)
    return None
