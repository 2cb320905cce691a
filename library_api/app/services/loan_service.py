"""
Business logic for loans.

Checking out a book runs a chain of pre‑conditions, each of which
aborts with its own message:

1. the book exists,
2. the member exists,
3. the book has no active loan,
4. the book is flagged available,
5. the member holds fewer than ``loan_limit`` active loans.

Returning a loan older than ``overdue_days`` whole days logs a warning
but is never refused.  The repository repeats checks 3 and 5 inside
the checkout transaction.
"""

import logging
from datetime import datetime
from typing import Callable, List, Tuple

from library_api.app.core.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
    wrap_error,
)
from library_api.app.repositories.library_repository import LibraryRepository, utcnow
from library_api.app.schemas.book import BookRead
from library_api.app.schemas.loan import LoanCreate, LoanDocument, LoanRead, LoanStatistics
from library_api.app.schemas.member import MemberRead
from library_api.app.services.validators import validate_loan


logger = logging.getLogger(__name__)

DEFAULT_LOAN_LIMIT = 5
DEFAULT_OVERDUE_DAYS = 30


def loan_age_days(loaned_at: datetime, now: datetime) -> int:
    """Whole days elapsed since ``loaned_at``."""
    return (now - loaned_at).days


class LoanService:
    """Servicio de préstamos."""

    def __init__(
        self,
        repository: LibraryRepository,
        loan_limit: int = DEFAULT_LOAN_LIMIT,
        overdue_days: int = DEFAULT_OVERDUE_DAYS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.loan_limit = loan_limit
        self.overdue_days = overdue_days
        self.clock = clock

    def is_overdue(self, loan: LoanRead) -> bool:
        return loan.is_active and loan_age_days(loan.loaned_at, self.clock()) > self.overdue_days

    async def check_business_rules(self, loan: LoanCreate) -> Tuple[BookRead, MemberRead, int]:
        """Run the checkout pre‑conditions.

        Returns the book, the member and the number of active loans the
        member currently holds.
        """
        book = await self.repository.get_book(loan.book_id)
        if book is None:
            raise NotFoundError("El libro no existe")

        member = await self.repository.get_member(loan.member_id)
        if member is None:
            raise NotFoundError("El usuario no existe")

        active = await self.repository.list_active_loans()
        if any(l.book_id == loan.book_id for l in active):
            raise ConflictError("Este libro ya está prestado")

        if not book.available:
            raise BusinessRuleError("El libro no está disponible")

        held = sum(1 for l in active if l.member_id == loan.member_id)
        if held >= self.loan_limit:
            raise BusinessRuleError(
                f"El usuario ya tiene el máximo de préstamos permitidos ({self.loan_limit})"
            )
        return book, member, held

    def _process(self, book: BookRead, member: MemberRead) -> LoanDocument:
        return LoanDocument(
            book_id=book.id,
            member_id=member.id,
            book_title=book.title,
            book_author=book.author,
            member_name=member.name,
            member_email=member.email,
            loaned_at=self.clock(),
        )

    async def list_active_loans(self) -> List[LoanRead]:
        try:
            return await self.repository.list_active_loans()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener préstamos activos") from exc

    async def list_loan_history(self) -> List[LoanRead]:
        try:
            return await self.repository.list_loan_history()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener historial de préstamos") from exc

    async def add_loan(self, loan: LoanCreate) -> LoanRead:
        """Check out a book to a member; the book becomes unavailable."""
        try:
            errors = validate_loan(loan.book_id, loan.member_id)
            if errors:
                raise ValidationError(", ".join(errors))
            book, member, held = await self.check_business_rules(loan)
            logger.debug("Member %s holds %s active loans", member.id, held)
            return await self.repository.add_loan(
                self._process(book, member), max_active_loans=self.loan_limit
            )
        except Exception as exc:
            raise wrap_error(exc, "Error al agregar préstamo") from exc

    async def return_loan(self, loan_id: str) -> LoanRead:
        """Close a loan.  Late returns are logged, not refused."""
        try:
            if not loan_id:
                raise ValidationError("ID del préstamo es requerido")
            loan = await self.repository.get_loan(loan_id)
            if loan is None:
                raise NotFoundError("El préstamo no existe")
            if not loan.is_active:
                raise ConflictError("Este préstamo ya fue devuelto")

            days = loan_age_days(loan.loaned_at, self.clock())
            if days > self.overdue_days:
                logger.warning(
                    "Préstamo %s devuelto con %s días de retraso (límite: %s días)",
                    loan_id,
                    days,
                    self.overdue_days,
                )
            return await self.repository.return_loan(loan_id)
        except Exception as exc:
            raise wrap_error(exc, "Error al devolver préstamo") from exc

    async def delete_loan(self, loan_id: str) -> None:
        try:
            if not loan_id:
                raise ValidationError("ID del préstamo es requerido")
            if await self.repository.get_loan(loan_id) is None:
                raise NotFoundError("El préstamo no existe")
            await self.repository.delete_loan(loan_id)
        except Exception as exc:
            raise wrap_error(exc, "Error al eliminar préstamo") from exc

    async def get_statistics(self) -> LoanStatistics:
        """Count active, total and overdue loans."""
        try:
            active = await self.repository.list_active_loans()
            history = await self.repository.list_loan_history()
            return LoanStatistics(
                active_loans=len(active),
                total_loans=len(active) + len(history),
                overdue_loans=sum(1 for loan in active if self.is_overdue(loan)),
            )
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener estadísticas") from exc

    async def search_loans(self, term: str) -> List[LoanRead]:
        """Search active and past loans by book title or member name."""
        try:
            active = await self.repository.list_active_loans()
            history = await self.repository.list_loan_history()
            needle = (term or "").lower()
            return [
                loan
                for loan in active + history
                if needle in loan.book_title.lower() or needle in loan.member_name.lower()
            ]
        except Exception as exc:
            raise wrap_error(exc, "Error al buscar préstamos") from exc
