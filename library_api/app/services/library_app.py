"""
Application layer: the library coordinator.

``LibraryApp`` is what the UI talks to.  Every call goes through the
same pattern: run the service operation, on success show an optional
acknowledgment toast, on failure show the error message as an error
toast and re‑raise so the caller still sees the failure.

Composite views fetch independent collections concurrently with
``asyncio.gather``; if any of them fails the whole view fails.

``build_library_app`` wires the layers together: store → repository →
services → coordinator.
"""

import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

from library_api.app.core.config import Settings
from library_api.app.core.db import DocumentStore
from library_api.app.core.notifications import Notifier
from library_api.app.repositories.library_repository import LibraryRepository
from library_api.app.schemas.book import BookCreate, BookRead, BookUpdate
from library_api.app.schemas.dashboard import FullData, IntegrityReport, LoanRefresh
from library_api.app.schemas.loan import LoanCreate, LoanRead, LoanStatistics
from library_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate
from library_api.app.services.book_service import BookService
from library_api.app.services.loan_service import LoanService
from library_api.app.services.member_service import MemberService


logger = logging.getLogger(__name__)

T = TypeVar("T")


class LibraryApp:
    """Coordinator for books, members and loans."""

    def __init__(
        self,
        book_service: BookService,
        member_service: MemberService,
        loan_service: LoanService,
        notifier: Notifier,
    ) -> None:
        self.books = book_service
        self.members = member_service
        self.loans = loan_service
        self.notifier = notifier

    async def _run(self, operation: Awaitable[T], success_message: Optional[str] = None) -> T:
        try:
            result = await operation
        except Exception as exc:
            self.notifier.show_message(str(exc), success=False)
            raise
        if success_message:
            self.notifier.show_message(success_message)
        return result

    # Books -------------------------------------------------------------

    async def load_books(self) -> List[BookRead]:
        return await self._run(self.books.list_books())

    async def add_book(self, book: BookCreate) -> BookRead:
        return await self._run(self.books.add_book(book), "Libro agregado exitosamente")

    async def edit_book(self, book_id: str, changes: BookUpdate) -> BookRead:
        return await self._run(self.books.edit_book(book_id, changes), "Libro actualizado exitosamente")

    async def delete_book(self, book_id: str) -> None:
        await self._run(self.books.delete_book(book_id), "Libro eliminado exitosamente")

    async def available_books(self) -> List[BookRead]:
        return await self._run(self.books.list_available_books())

    async def search_books(self, term: str) -> List[BookRead]:
        return await self._run(self.books.search_books(term))

    # Members -----------------------------------------------------------

    async def load_members(self) -> List[MemberRead]:
        return await self._run(self.members.list_members())

    async def add_member(self, member: MemberCreate) -> MemberRead:
        return await self._run(self.members.add_member(member), "Usuario registrado exitosamente")

    async def edit_member(self, member_id: str, changes: MemberUpdate) -> MemberRead:
        return await self._run(
            self.members.edit_member(member_id, changes), "Usuario actualizado exitosamente"
        )

    async def delete_member(self, member_id: str) -> None:
        await self._run(self.members.delete_member(member_id), "Usuario eliminado exitosamente")

    async def active_members(self) -> List[MemberRead]:
        return await self._run(self.members.list_active_members())

    async def search_members(self, term: str) -> List[MemberRead]:
        return await self._run(self.members.search_members(term))

    async def can_delete_member(self, member_id: str) -> bool:
        return await self._run(self.members.can_delete_member(member_id))

    # Loans -------------------------------------------------------------

    async def load_active_loans(self) -> List[LoanRead]:
        return await self._run(self.loans.list_active_loans())

    async def load_loan_history(self) -> List[LoanRead]:
        return await self._run(self.loans.list_loan_history())

    async def add_loan(self, loan: LoanCreate) -> LoanRead:
        return await self._run(self.loans.add_loan(loan), "Préstamo registrado exitosamente")

    async def return_loan(self, loan_id: str) -> LoanRead:
        return await self._run(self.loans.return_loan(loan_id), "Libro devuelto exitosamente")

    async def delete_loan(self, loan_id: str) -> None:
        await self._run(self.loans.delete_loan(loan_id), "Préstamo eliminado exitosamente")

    async def loan_statistics(self) -> LoanStatistics:
        return await self._run(self.loans.get_statistics())

    async def search_loans(self, term: str) -> List[LoanRead]:
        return await self._run(self.loans.search_loans(term))

    # Composite views ---------------------------------------------------

    async def get_full_data(self) -> FullData:
        """Books, members, active loans, history and statistics in one object."""
        try:
            books, members, active_loans, history = await asyncio.gather(
                self.books.list_books(),
                self.members.list_members(),
                self.loans.list_active_loans(),
                self.loans.list_loan_history(),
            )
            statistics = await self.loans.get_statistics()
        except Exception:
            self.notifier.show_message("Error al cargar datos completos", success=False)
            raise
        return FullData(
            books=books,
            members=members,
            active_loans=active_loans,
            history=history,
            statistics=statistics,
        )

    async def refresh_loan_data(self) -> LoanRefresh:
        """Everything the checkout screen needs after a loan changes."""
        try:
            active_loans, history, available_books, active_members = await asyncio.gather(
                self.loans.list_active_loans(),
                self.loans.list_loan_history(),
                self.books.list_available_books(),
                self.members.list_active_members(),
            )
        except Exception:
            self.notifier.show_message("Error al refrescar datos de préstamos", success=False)
            raise
        return LoanRefresh(
            active_loans=active_loans,
            history=history,
            available_books=available_books,
            active_members=active_members,
        )

    async def validate_integrity(self) -> IntegrityReport:
        """Cross‑check the snapshot for two kinds of inconsistency.

        * a book flagged unavailable that no active loan references;
        * an inactive member who still holds an active loan.
        """
        try:
            data = await self.get_full_data()
        except Exception:
            self.notifier.show_message("Error al validar integridad de datos", success=False)
            raise

        problems: List[str] = []
        loaned_books = {loan.book_id for loan in data.active_loans}
        borrowers = {loan.member_id for loan in data.active_loans}

        for book in data.books:
            if not book.available and book.id not in loaned_books:
                problems.append(
                    f'Libro "{book.title}" marcado como no disponible pero sin préstamos activos'
                )
        for member in data.members:
            if not member.active and member.id in borrowers:
                problems.append(f'Usuario "{member.name}" inactivo pero con préstamos activos')

        if problems:
            logger.warning("Integrity check found %s problem(s)", len(problems))
        return IntegrityReport(valid=not problems, problems=problems)


def build_library_app(
    settings: Settings,
    store: Optional[DocumentStore] = None,
    notifier: Optional[Notifier] = None,
) -> LibraryApp:
    """Construct the repository, services and coordinator for ``settings``."""
    store = store or DocumentStore(settings.database_url)
    notifier = notifier or Notifier(display_seconds=settings.notification_seconds)
    repository = LibraryRepository(store, notifier=notifier)
    return LibraryApp(
        BookService(repository),
        MemberService(repository),
        LoanService(
            repository,
            loan_limit=settings.loan_limit,
            overdue_days=settings.overdue_days,
        ),
        notifier,
    )
