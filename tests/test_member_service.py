import asyncio

import pytest

from library_api.app.core.errors import ConflictError, NotFoundError, ValidationError
from library_api.app.schemas.book import BookCreate
from library_api.app.schemas.loan import LoanCreate
from library_api.app.schemas.member import MemberCreate, MemberUpdate


def add_member(library, name="Ana Pérez", email="Ana@Mail.com"):
    return asyncio.run(library.members.add_member(MemberCreate(name=name, email=email)))


def test_add_member_normalizes_email(library):
    member = add_member(library, name=" Ana Pérez ", email="  Ana@Mail.com ")

    assert member.email == "ana@mail.com"
    assert member.name == "Ana Pérez"
    assert member.active is True


def test_duplicate_email_ignores_case(library):
    add_member(library)
    with pytest.raises(ConflictError, match="Ya existe un usuario con este email"):
        add_member(library, name="Otra Persona", email="ANA@mail.com")


def test_invalid_member(library):
    with pytest.raises(ValidationError) as excinfo:
        add_member(library, name="Ana 2", email="ana-at-mail")
    message = str(excinfo.value)
    assert message.startswith("Error al agregar usuario: ")
    assert "El nombre solo puede contener letras y espacios" in message
    assert "El formato del email no es válido" in message


def test_members_sorted_by_name(library):
    add_member(library, name="Luis Gómez", email="luis@mail.com")
    add_member(library, name="Ana Pérez", email="ana@mail.com")
    assert [m.name for m in asyncio.run(library.members.list_members())] == ["Ana Pérez", "Luis Gómez"]


def test_edit_member_email_conflict(library):
    add_member(library, name="Ana Pérez", email="ana@mail.com")
    luis = add_member(library, name="Luis Gómez", email="luis@mail.com")

    with pytest.raises(ConflictError):
        asyncio.run(library.members.edit_member(luis.id, MemberUpdate(email="Ana@mail.com")))


def test_edit_member_and_deactivate(library):
    ana = add_member(library)

    updated = asyncio.run(
        library.members.edit_member(ana.id, MemberUpdate(email="ANA.PEREZ@mail.com", active=False))
    )
    assert updated.email == "ana.perez@mail.com"
    assert updated.name == "Ana Pérez"
    assert updated.active is False
    assert asyncio.run(library.members.list_active_members()) == []


def test_edit_unknown_member(library):
    with pytest.raises(NotFoundError):
        asyncio.run(library.members.edit_member("missing", MemberUpdate(name="Nadie")))


def test_delete_member_with_active_loan_fails(library):
    ana = add_member(library)
    book = asyncio.run(library.books.add_book(BookCreate(title="Rayuela", author="Julio Cortázar")))
    asyncio.run(library.loans.add_loan(LoanCreate(book_id=book.id, member_id=ana.id)))

    assert asyncio.run(library.members.can_delete_member(ana.id)) is False
    with pytest.raises(ConflictError, match="No se puede eliminar un usuario que tiene préstamos activos"):
        asyncio.run(library.members.delete_member(ana.id))


def test_delete_member(library):
    ana = add_member(library)
    assert asyncio.run(library.members.can_delete_member(ana.id)) is True
    asyncio.run(library.members.delete_member(ana.id))
    assert asyncio.run(library.members.list_members()) == []


def test_search_members(library):
    add_member(library, name="Ana Pérez", email="ana@mail.com")
    add_member(library, name="Luis Gómez", email="luis@correo.org")

    assert [m.name for m in asyncio.run(library.members.search_members("correo"))] == ["Luis Gómez"]
    assert [m.name for m in asyncio.run(library.members.search_members("ana"))] == ["Ana Pérez"]
