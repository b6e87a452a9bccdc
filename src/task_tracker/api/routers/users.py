"""Administrative user management routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from ...deps import AdminUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...models import UserRole
from ...schemas import (
    Envelope,
    MessageResponse,
    Pagination,
    UserAdminUpdate,
    UserListData,
    UserPublic,
    UserStatistics,
)
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=Envelope[UserListData],
    summary="List user accounts (admin and manager only)",
)
async def list_users(
    session: DatabaseSessionDependency,
    _: PrivilegedUserDependency,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    role: UserRole | None = None,
    search: Annotated[str | None, Query(max_length=100)] = None,
) -> Envelope[UserListData]:
    result = await UserService(session).list_users(page=page, limit=limit, role=role, search=search)
    pagination = Pagination(
        current=result.page,
        total=result.total_pages,
        count=len(result.users),
        total_count=result.total_count,
    )
    users = [UserPublic.model_validate(user) for user in result.users]
    return Envelope[UserListData](data=UserListData(users=users, pagination=pagination))


@router.get(
    "/stats",
    response_model=Envelope[UserStatistics],
    summary="Account totals by role and activity (admin only)",
)
async def read_user_statistics(
    session: DatabaseSessionDependency,
    _: AdminUserDependency,
) -> Envelope[UserStatistics]:
    stats = await UserService(session).get_statistics()
    return Envelope[UserStatistics](
        data=UserStatistics(
            total=stats.total,
            active=stats.active,
            inactive=stats.inactive,
            by_role=stats.by_role,
        )
    )


@router.get(
    "/{user_id}",
    response_model=Envelope[UserPublic],
    summary="Retrieve a user account (admin and manager only)",
)
async def read_user(
    user_id: int,
    session: DatabaseSessionDependency,
    _: PrivilegedUserDependency,
) -> Envelope[UserPublic]:
    user = await UserService(session).get_user(user_id)
    return Envelope[UserPublic](data=UserPublic.model_validate(user))


@router.put(
    "/{user_id}",
    response_model=Envelope[UserPublic],
    summary="Update a user account (admin only)",
)
async def update_user(
    user_id: int,
    payload: UserAdminUpdate,
    session: DatabaseSessionDependency,
    _: AdminUserDependency,
) -> Envelope[UserPublic]:
    user = await UserService(session).update_user(
        user_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        is_active=payload.is_active,
    )
    return Envelope[UserPublic](
        data=UserPublic.model_validate(user),
        message="User updated successfully",
    )


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user account and the tasks it created (admin only)",
)
async def delete_user(
    user_id: int,
    session: DatabaseSessionDependency,
    current_user: AdminUserDependency,
) -> MessageResponse:
    await UserService(session).delete_user(user_id, acting_user_id=current_user.id)
    return MessageResponse(message="User deleted successfully")
