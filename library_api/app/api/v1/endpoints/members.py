"""
Member endpoints for API v1.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from library_api.app.api.deps import get_library
from library_api.app.schemas.member import MemberCreate, MemberRead, MemberUpdate
from library_api.app.services.library_app import LibraryApp

router = APIRouter()


@router.get("/", response_model=List[MemberRead])
async def list_members(
    q: Optional[str] = Query(None, description="Search in name or email"),
    library: LibraryApp = Depends(get_library),
) -> List[MemberRead]:
    if q:
        return await library.search_members(q)
    return await library.load_members()


@router.get("/active", response_model=List[MemberRead])
async def list_active_members(library: LibraryApp = Depends(get_library)) -> List[MemberRead]:
    return await library.active_members()


@router.post("/", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
async def add_member(member: MemberCreate, library: LibraryApp = Depends(get_library)) -> MemberRead:
    """Registrar un usuario.  The email is stored lowercase."""
    return await library.add_member(member)


@router.put("/{member_id}", response_model=MemberRead)
async def edit_member(
    member_id: str,
    changes: MemberUpdate,
    library: LibraryApp = Depends(get_library),
) -> MemberRead:
    return await library.edit_member(member_id, changes)


@router.get("/{member_id}/can-delete")
async def can_delete_member(member_id: str, library: LibraryApp = Depends(get_library)) -> dict:
    return {"member_id": member_id, "can_delete": await library.can_delete_member(member_id)}


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(member_id: str, library: LibraryApp = Depends(get_library)) -> None:
    await library.delete_member(member_id)
    return None
