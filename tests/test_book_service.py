import asyncio

import pytest

from library_api.app.core.errors import ConflictError, NotFoundError, ValidationError
from library_api.app.schemas.book import BookCreate, BookUpdate
from library_api.app.schemas.loan import LoanCreate
from library_api.app.schemas.member import MemberCreate


def add_book(library, title="Rayuela", author="Julio Cortázar"):
    return asyncio.run(library.books.add_book(BookCreate(title=title, author=author)))


def test_add_book_is_available_and_trimmed(library):
    book = add_book(library, title="  Ficciones ", author=" Jorge Luis Borges ")

    assert book.id
    assert book.available is True
    assert book.title == "Ficciones"
    assert book.author == "Jorge Luis Borges"
    assert asyncio.run(library.books.list_books())[0].id == book.id


def test_add_duplicate_book_conflicts(library):
    add_book(library)

    with pytest.raises(ConflictError, match="Este libro ya existe en la biblioteca"):
        add_book(library)
    assert len(asyncio.run(library.books.list_books())) == 1


def test_duplicate_check_is_case_sensitive(library):
    add_book(library, title="Rayuela")
    add_book(library, title="RAYUELA")
    assert len(asyncio.run(library.books.list_books())) == 2


def test_invalid_book_is_rejected_with_operation_prefix(library):
    with pytest.raises(ValidationError) as excinfo:
        add_book(library, title="X", author="Autor <b>")
    message = str(excinfo.value)
    assert message.startswith("Error al agregar libro: ")
    assert "El título debe tener al menos 2 caracteres" in message
    assert "El autor contiene caracteres no válidos" in message


def test_books_are_sorted_by_title_ignoring_accents(library):
    add_book(library, title="Zapatos rojos", author="Autor Uno")
    add_book(library, title="Árboles", author="Autor Dos")
    add_book(library, title="azúcar", author="Autor Tres")

    titles = [b.title for b in asyncio.run(library.books.list_books())]
    assert titles == ["Árboles", "azúcar", "Zapatos rojos"]


def test_edit_book_changes_only_given_fields(library):
    book = add_book(library)

    updated = asyncio.run(library.books.edit_book(book.id, BookUpdate(author=" J. Cortázar ")))

    assert updated.title == "Rayuela"
    assert updated.author == "J. Cortázar"
    assert updated.available is True


def test_edit_book_rejects_blank_title(library):
    book = add_book(library)
    with pytest.raises(ValidationError, match="Error al editar libro"):
        asyncio.run(library.books.edit_book(book.id, BookUpdate(title="   ")))


def test_edit_unknown_book(library):
    with pytest.raises(NotFoundError, match="El libro no existe"):
        asyncio.run(library.books.edit_book("missing", BookUpdate(title="Nuevo título")))


def test_delete_book_without_loans(library):
    book = add_book(library)
    asyncio.run(library.books.delete_book(book.id))
    assert asyncio.run(library.books.list_books()) == []


def test_delete_book_with_active_loan_fails(library):
    book = add_book(library)
    member = asyncio.run(library.members.add_member(MemberCreate(name="Ana Pérez", email="ana@mail.com")))
    asyncio.run(library.loans.add_loan(LoanCreate(book_id=book.id, member_id=member.id)))

    with pytest.raises(ConflictError, match="préstamos activos"):
        asyncio.run(library.books.delete_book(book.id))
    assert len(asyncio.run(library.books.list_books())) == 1


def test_delete_unknown_book(library):
    with pytest.raises(NotFoundError, match="Error al eliminar libro: El libro no existe"):
        asyncio.run(library.books.delete_book("missing"))


def test_search_books(library):
    add_book(library, title="Rayuela", author="Julio Cortázar")
    add_book(library, title="Ficciones", author="Jorge Luis Borges")

    assert [b.title for b in asyncio.run(library.books.search_books("borges"))] == ["Ficciones"]
    assert [b.title for b in asyncio.run(library.books.search_books("RAY"))] == ["Rayuela"]
    assert len(asyncio.run(library.books.search_books(""))) == 2
