"""
Data layer for the library.

``LibraryRepository`` issues every query and mutation against the
document store.  It owns sanitation at the storage boundary (trimming,
lowercasing emails), identity checks (no duplicate title+author pair, no
duplicate email) and dependency checks (no deletion while active loans
reference a row).  Listings are sorted here rather than by the store so
that the ordering contract does not depend on store indexes.

Every write that depends on a prior read runs inside a single store
transaction: checkout, return and loan deletion, book and member
edits (duplicate probe plus write), and book and member deletion
(active‑loan probe plus delete).  None of them can interleave with a
concurrent checkout.

Every operation is fail‑fast: errors are logged and re‑raised, never
retried.
"""

import logging
import unicodedata
from contextlib import contextmanager, nullcontext
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from library_api.app.core.db import DocumentSession, DocumentStore
from library_api.app.core.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from library_api.app.core.notifications import Notifier
from library_api.app.schemas.book import BookCreate, BookRead, BookUpdate
from library_api.app.schemas.loan import LoanDocument, LoanRead, LoanStatus
from library_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate
from library_api.app.services.validators import is_valid_email


logger = logging.getLogger(__name__)

BOOKS = "libros"
MEMBERS = "usuarios"
LOANS = "prestamos"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def collation_key(value: str) -> str:
    """Accent‑ and case‑insensitive sort key ("Árbol" sorts with "arbol")."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


@contextmanager
def _log_errors(action: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        logger.error("Error al %s: %s", action, exc)
        raise


class LibraryRepository:
    """Repository for the ``libros``, ``usuarios`` and ``prestamos`` collections."""

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.clock = clock

    def _loading(self, label: str):
        if self.notifier is None:
            return nullcontext()
        return self.notifier.loading(label)

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------

    async def list_books(self) -> List[BookRead]:
        with _log_errors("obtener libros"), self._loading("Cargando libros..."):
            docs = await self.store.get_all(BOOKS)
            return self._sorted_books(docs)

    async def list_available_books(self) -> List[BookRead]:
        with _log_errors("obtener libros disponibles"), self._loading("Cargando libros disponibles..."):
            docs = await self.store.find(BOOKS, [("available", "==", True)])
            return self._sorted_books(docs)

    @staticmethod
    def _sorted_books(docs: List[Dict[str, Any]]) -> List[BookRead]:
        books = [BookRead(**doc) for doc in docs]
        return sorted(books, key=lambda b: (collation_key(b.title), b.title))

    async def get_book(self, book_id: str) -> Optional[BookRead]:
        with _log_errors("obtener libro"):
            doc = await self.store.get(BOOKS, book_id)
            return BookRead(**doc) if doc else None

    async def add_book(self, book: BookCreate) -> BookRead:
        with _log_errors("agregar libro"), self._loading("Agregando libro..."):
            if not (book.title or "").strip() or not (book.author or "").strip():
                raise ValidationError("Título y autor son requeridos.")
            title = book.title.strip()
            author = book.author.strip()

            if await self.store.exists(BOOKS, [("title", "==", title), ("author", "==", author)]):
                raise ConflictError("Este libro ya existe en la biblioteca.")

            data = {
                "title": title,
                "author": author,
                "created_at": self.clock(),
                "available": True,
            }
            book_id = await self.store.add(BOOKS, data)
            logger.info("Book %s added: %s / %s", book_id, title, author)
            return BookRead(id=book_id, **data)

    async def update_book(self, book_id: str, changes: BookUpdate) -> BookRead:
        with _log_errors("editar libro"):
            if not book_id:
                raise ValidationError("ID y datos actualizados son requeridos.")
            if changes.title is not None and not changes.title.strip():
                raise ValidationError("El título no puede estar vacío.")
            if changes.author is not None and not changes.author.strip():
                raise ValidationError("El autor no puede estar vacío.")

            clean: Dict[str, Any] = {}
            if changes.title is not None:
                clean["title"] = changes.title.strip()
            if changes.author is not None:
                clean["author"] = changes.author.strip()

            def edit(session: DocumentSession) -> BookRead:
                current = session.get(BOOKS, book_id)
                if current is None:
                    raise NotFoundError("El libro no existe.")
                if not clean:
                    return BookRead(**current)

                merged = {**current, **clean}
                duplicates = session.find(
                    BOOKS, [("title", "==", merged["title"]), ("author", "==", merged["author"])]
                )
                if any(doc["id"] != book_id for doc in duplicates):
                    raise ConflictError("Este libro ya existe en la biblioteca.")
                return BookRead(**session.update(BOOKS, book_id, clean))

            return await self.store.transaction(edit)

    async def delete_book(self, book_id: str) -> None:
        """Delete a book unless an active loan references it.

        The loan probe and the delete share one transaction, so a
        checkout cannot land between them.
        """

        def remove(session: DocumentSession) -> None:
            if session.find(LOANS, [("book_id", "==", book_id), ("returned_at", "==", None)]):
                raise ConflictError("No se puede eliminar un libro que tiene préstamos activos.")
            session.delete(BOOKS, book_id)

        with _log_errors("eliminar libro"):
            if not book_id:
                raise ValidationError("ID es requerido.")
            await self.store.transaction(remove)
            logger.info("Book %s deleted", book_id)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    async def list_members(self) -> List[MemberRead]:
        with _log_errors("obtener usuarios"), self._loading("Cargando usuarios..."):
            docs = await self.store.get_all(MEMBERS)
            return self._sorted_members(docs)

    async def list_active_members(self) -> List[MemberRead]:
        with _log_errors("obtener usuarios activos"), self._loading("Cargando usuarios activos..."):
            docs = await self.store.find(MEMBERS, [("active", "==", True)])
            return self._sorted_members(docs)

    @staticmethod
    def _sorted_members(docs: List[Dict[str, Any]]) -> List[MemberRead]:
        members = [MemberRead(**doc) for doc in docs]
        return sorted(members, key=lambda m: (collation_key(m.name), m.name))

    async def get_member(self, member_id: str) -> Optional[MemberRead]:
        with _log_errors("obtener usuario"):
            doc = await self.store.get(MEMBERS, member_id)
            return MemberRead(**doc) if doc else None

    async def add_member(self, member: MemberCreate) -> MemberRead:
        with _log_errors("agregar usuario"), self._loading("Agregando usuario..."):
            if not (member.name or "").strip() or not (member.email or "").strip():
                raise ValidationError("Nombre y email son requeridos.")
            email = member.email.strip().lower()
            if not is_valid_email(email):
                raise ValidationError("El formato del email no es válido.")

            if await self.store.exists(MEMBERS, [("email", "==", email)]):
                raise ConflictError("Ya existe un usuario con este email.")

            data = {
                "name": member.name.strip(),
                "email": email,
                "registered_at": self.clock(),
                "active": True,
            }
            member_id = await self.store.add(MEMBERS, data)
            logger.info("Member %s registered: %s", member_id, email)
            return MemberRead(id=member_id, **data)

    async def update_member(self, member_id: str, changes: MemberUpdate) -> MemberRead:
        with _log_errors("editar usuario"):
            if not member_id:
                raise ValidationError("ID y datos actualizados son requeridos.")
            if changes.name is not None and not changes.name.strip():
                raise ValidationError("El nombre no puede estar vacío.")
            if changes.email is not None and not is_valid_email(changes.email.strip()):
                raise ValidationError("El formato del email no es válido.")

            clean: Dict[str, Any] = {}
            if changes.name is not None:
                clean["name"] = changes.name.strip()
            if changes.email is not None:
                clean["email"] = changes.email.strip().lower()
            if changes.active is not None:
                clean["active"] = changes.active

            def edit(session: DocumentSession) -> MemberRead:
                current = session.get(MEMBERS, member_id)
                if current is None:
                    raise NotFoundError("El usuario no existe.")
                if "email" in clean:
                    others = session.find(MEMBERS, [("email", "==", clean["email"])])
                    if any(doc["id"] != member_id for doc in others):
                        raise ConflictError("Ya existe un usuario con este email.")
                if not clean:
                    return MemberRead(**current)
                return MemberRead(**session.update(MEMBERS, member_id, clean))

            return await self.store.transaction(edit)

    async def delete_member(self, member_id: str) -> None:
        def remove(session: DocumentSession) -> None:
            if session.find(LOANS, [("member_id", "==", member_id), ("returned_at", "==", None)]):
                raise ConflictError("No se puede eliminar un usuario que tiene préstamos activos.")
            session.delete(MEMBERS, member_id)

        with _log_errors("eliminar usuario"):
            if not member_id:
                raise ValidationError("ID es requerido.")
            await self.store.transaction(remove)
            logger.info("Member %s deleted", member_id)

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------

    async def list_active_loans(self) -> List[LoanRead]:
        with _log_errors("obtener préstamos activos"), self._loading("Cargando préstamos activos..."):
            docs = await self.store.find(LOANS, [("returned_at", "==", None)])
            loans = [LoanRead(**doc) for doc in docs]
            return sorted(loans, key=lambda l: l.loaned_at, reverse=True)

    async def list_loan_history(self) -> List[LoanRead]:
        with _log_errors("obtener historial de préstamos"), self._loading("Cargando historial de préstamos..."):
            docs = await self.store.find(LOANS, [("returned_at", "!=", None)])
            loans = [LoanRead(**doc) for doc in docs]
            return sorted(loans, key=lambda l: l.returned_at or _EPOCH, reverse=True)

    async def get_loan(self, loan_id: str) -> Optional[LoanRead]:
        with _log_errors("obtener préstamo"):
            doc = await self.store.get(LOANS, loan_id)
            return LoanRead(**doc) if doc else None

    async def add_loan(self, loan: LoanDocument, max_active_loans: Optional[int] = None) -> LoanRead:
        """Persist a checkout and mark the book unavailable.

        The existence, "already loaned" and (when ``max_active_loans`` is
        given) loan‑limit checks are repeated inside the transaction, so
        two concurrent checkouts of the same book cannot both succeed.
        The denormalized book/member fields are refreshed from the rows
        read in the transaction.
        """

        def checkout(session: DocumentSession) -> LoanRead:
            book = session.get(BOOKS, loan.book_id)
            if book is None:
                raise NotFoundError("El libro no existe.")
            member = session.get(MEMBERS, loan.member_id)
            if member is None:
                raise NotFoundError("El usuario no existe.")
            if session.find(LOANS, [("book_id", "==", loan.book_id), ("returned_at", "==", None)]):
                raise ConflictError("Este libro ya está prestado.")
            if max_active_loans is not None:
                held = session.find(LOANS, [("member_id", "==", loan.member_id), ("returned_at", "==", None)])
                if len(held) >= max_active_loans:
                    raise BusinessRuleError(
                        f"El usuario ya tiene el máximo de préstamos permitidos ({max_active_loans})"
                    )

            record = loan.model_copy(
                update={
                    "book_title": book["title"],
                    "book_author": book["author"],
                    "member_name": member["name"],
                    "member_email": member["email"],
                    "returned_at": None,
                    "status": LoanStatus.ACTIVE,
                }
            )
            data = record.model_dump(mode="json")
            loan_id = session.add(LOANS, data)
            session.update(BOOKS, loan.book_id, {"available": False})
            return LoanRead(id=loan_id, **record.model_dump())

        with _log_errors("agregar préstamo"), self._loading("Registrando préstamo..."):
            if not loan.book_id or not loan.member_id:
                raise ValidationError("ID del libro y usuario son requeridos.")
            created = await self.store.transaction(checkout)
            logger.info("Loan %s created: book %s -> member %s", created.id, loan.book_id, loan.member_id)
            return created

    async def return_loan(self, loan_id: str) -> LoanRead:
        """Close an active loan and make its book available again."""
        returned_at = self.clock()

        def give_back(session: DocumentSession) -> LoanRead:
            doc = session.get(LOANS, loan_id)
            if doc is None:
                raise NotFoundError("El préstamo no existe.")
            if doc.get("returned_at") is not None:
                raise ConflictError("Este préstamo ya fue devuelto.")
            changes = {"returned_at": returned_at, "status": LoanStatus.RETURNED.value}
            session.update(LOANS, loan_id, changes)
            if session.get(BOOKS, doc["book_id"]) is not None:
                session.update(BOOKS, doc["book_id"], {"available": True})
            return LoanRead(**{**doc, **changes})

        with _log_errors("devolver préstamo"), self._loading("Devolviendo libro..."):
            if not loan_id:
                raise ValidationError("ID del préstamo es requerido.")
            returned = await self.store.transaction(give_back)
            logger.info("Loan %s returned", loan_id)
            return returned

    async def delete_loan(self, loan_id: str) -> None:
        """Delete a loan; an active loan releases its book."""

        def remove(session: DocumentSession) -> None:
            doc = session.get(LOANS, loan_id)
            if doc is None:
                raise NotFoundError("El préstamo no existe.")
            session.delete(LOANS, loan_id)
            if doc.get("returned_at") is None and session.get(BOOKS, doc["book_id"]) is not None:
                session.update(BOOKS, doc["book_id"], {"available": True})

        with _log_errors("eliminar préstamo"):
            if not loan_id:
                raise ValidationError("ID es requerido.")
            await self.store.transaction(remove)
            logger.info("Loan %s deleted", loan_id)
