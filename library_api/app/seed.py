"""
Demo data for a fresh database.

``seed_demo_data`` goes through the coordinator, so every record is
validated exactly as if it had been entered through the UI.
"""

import logging
from typing import Dict

from library_api.app.schemas.book import BookCreate
from library_api.app.schemas.loan import LoanCreate
from library_api.app.schemas.member import MemberCreate
from library_api.app.services.library_app import LibraryApp


logger = logging.getLogger(__name__)

DEMO_BOOKS = [
    ("Cien años de soledad", "Gabriel García Márquez"),
    ("Rayuela", "Julio Cortázar"),
    ("La casa de los espíritus", "Isabel Allende"),
    ("Ficciones", "Jorge Luis Borges"),
]

DEMO_MEMBERS = [
    ("Ana Pérez", "ana@mail.com"),
    ("Luis Gómez", "luis.gomez@mail.com"),
]


async def seed_demo_data(library: LibraryApp) -> Dict[str, int]:
    """Insert demo books and members and lend the first book.

    Returns the number of records created per kind.  Intended for an
    empty database; duplicates are rejected like any other input.
    """
    books = [await library.add_book(BookCreate(title=t, author=a)) for t, a in DEMO_BOOKS]
    members = [await library.add_member(MemberCreate(name=n, email=e)) for n, e in DEMO_MEMBERS]
    await library.add_loan(LoanCreate(book_id=books[0].id, member_id=members[0].id))
    logger.info("Seeded %s books and %s members", len(books), len(members))
    return {"books": len(books), "members": len(members), "loans": 1}
