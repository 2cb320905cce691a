"""
Business logic for members.

Names may contain letters (accents included) and spaces only; emails
are validated, lowercased and must be unique.  Deleting a member is
refused while they hold an active loan.
"""

import logging
from typing import List

from library_api.app.core.errors import NotFoundError, ValidationError, wrap_error
from library_api.app.repositories.library_repository import LibraryRepository
from library_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate
from library_api.app.services.validators import validate_member, validate_member_update


logger = logging.getLogger(__name__)


class MemberService:
    """Servicio de usuarios."""

    def __init__(self, repository: LibraryRepository) -> None:
        self.repository = repository

    @staticmethod
    def _process(member: MemberCreate) -> MemberCreate:
        return MemberCreate(name=member.name.strip(), email=member.email.strip().lower())

    async def list_members(self) -> List[MemberRead]:
        try:
            return await self.repository.list_members()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener usuarios") from exc

    async def add_member(self, member: MemberCreate) -> MemberRead:
        try:
            errors = validate_member(member.name, member.email)
            if errors:
                logger.warning("Rejected member %r: %s", member.email, errors)
                raise ValidationError(", ".join(errors))
            return await self.repository.add_member(self._process(member))
        except Exception as exc:
            raise wrap_error(exc, "Error al agregar usuario") from exc

    async def edit_member(self, member_id: str, changes: MemberUpdate) -> MemberRead:
        try:
            if not member_id:
                raise ValidationError("ID del usuario es requerido")
            errors = validate_member_update(changes.name, changes.email)
            if errors:
                raise ValidationError(", ".join(errors))
            return await self.repository.update_member(member_id, changes)
        except Exception as exc:
            raise wrap_error(exc, "Error al editar usuario") from exc

    async def delete_member(self, member_id: str) -> None:
        try:
            if not member_id:
                raise ValidationError("ID del usuario es requerido")
            if await self.repository.get_member(member_id) is None:
                raise NotFoundError("El usuario no existe")
            await self.repository.delete_member(member_id)
        except Exception as exc:
            raise wrap_error(exc, "Error al eliminar usuario") from exc

    async def list_active_members(self) -> List[MemberRead]:
        try:
            return await self.repository.list_active_members()
        except Exception as exc:
            raise wrap_error(exc, "Error al obtener usuarios activos") from exc

    async def search_members(self, term: str) -> List[MemberRead]:
        """Case‑insensitive substring match on name or email."""
        try:
            members = await self.repository.list_members()
            needle = (term or "").lower()
            return [m for m in members if needle in m.name.lower() or needle in m.email.lower()]
        except Exception as exc:
            raise wrap_error(exc, "Error al buscar usuarios") from exc

    async def can_delete_member(self, member_id: str) -> bool:
        """Return ``True`` when the member holds no active loan."""
        try:
            active = await self.repository.list_active_loans()
            return not any(loan.member_id == member_id for loan in active)
        except Exception as exc:
            raise wrap_error(exc, "Error al validar eliminación de usuario") from exc
