"""
Business logic for books.

``BookService`` validates titles and authors before delegating to the
repository and prefixes every error with the failed operation, e.g.
``"Error al agregar libro: Este libro ya existe en la biblioteca."``.
"""

import logging
from typing import List

from library_api.app.core.errors import NotFoundError, ValidationError, wrap_error
from library_api.app.repositories.library_repository import LibraryRepository
from library_api.app.schemas.book import BookCreate, BookRead, BookUpdate
from library_api.app.services.validators import validate_book, validate_book_update


logger = logging.getLogger(__name__)


class BookService:
    """Servicio de libros: validation and lookups for the catalogue."""

    def __init__(self, repository: LibraryRepository) -> None:
        self.repository = repository

    @staticmethod
    def _process(book: BookCreate) -> BookCreate:
        return BookCreate(title=book.title.strip(), author=book.author.strip())

    async def list_books(self) -> List[BookRead]:
        try:
            return await self.repository.list_books()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener libros") from exc

    async def add_book(self, book: BookCreate) -> BookRead:
        """Validate and store a new book; it starts out available."""
        try:
            errors = validate_book(book.title, book.author)
            if errors:
                logger.warning("Rejected book %r: %s", book.title, errors)
                raise ValidationError(", ".join(errors))
            return await self.repository.add_book(self._process(book))
        except Exception as exc:
            raise wrap_error(exc, "Error al agregar libro") from exc

    async def edit_book(self, book_id: str, changes: BookUpdate) -> BookRead:
        """Validate the fields present in ``changes`` and apply them."""
        try:
            if not book_id:
                raise ValidationError("ID del libro es requerido")
            errors = validate_book_update(changes.title, changes.author)
            if errors:
                raise ValidationError(", ".join(errors))
            return await self.repository.update_book(book_id, changes)
        except Exception as exc:
            raise wrap_error(exc, "Error al editar libro") from exc

    async def delete_book(self, book_id: str) -> None:
        try:
            if not book_id:
                raise ValidationError("ID del libro es requerido")
            if await self.repository.get_book(book_id) is None:
                raise NotFoundError("El libro no existe")
            await self.repository.delete_book(book_id)
        except Exception as exc:
            raise wrap_error(exc, "Error al eliminar libro") from exc

    async def list_available_books(self) -> List[BookRead]:
        try:
            return await self.repository.list_available_books()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener libros disponibles") from exc

    async def search_books(self, term: str) -> List[BookRead]:
        """Case‑insensitive substring match on title or author."""
        try:
            books = await self.repository.list_books()
            needle = (term or "").lower()
            return [b for b in books if needle in b.title.lower() or needle in b.author.lower()]
        except Exception as exc:
            raise wrap_error(exc, "Error al buscar libros") from exc
