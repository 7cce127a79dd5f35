# app/api/v1/routers/users.py
from __future__ import annotations

import datetime as dt
import logging
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from tortoise import timezone

from app.api.v1.deps import require_admin
from app.api.v1.serializers import user_to_dict
from app.core.errors import Conflict, Forbidden, NotFound
from app.models.user import User
from app.schemas.user import UserCreateIn, UserUpdateIn
from app.services.catalog_query import CatalogQuery

logger = logging.getLogger("uvicorn.error")

# Every route here is admin only
router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_admin)])

RECENT_REGISTRATION_DAYS = 30


async def _get_user_or_404(user_id: uuid.UUID) -> User:
    u = await User.get_or_none(id=user_id)
    if not u:
        raise NotFound("User not found")
    return u


def _is_self(current_admin: User, u: User) -> bool:
    return str(current_admin.id) == str(u.id)


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(default=None, min_length=1, max_length=100, description="Match name or email"),
    role: Optional[Literal["admin", "user"]] = Query(default=None),
    isActive: Optional[bool] = Query(default=None),
):
    """
    Get paginated list of users, newest first (admin only).

    `search` is a case-insensitive substring match on name OR email;
    `role` and `isActive` narrow the result further.
    """
    query = CatalogQuery(
        page=page,
        limit=limit,
        search=search,
        is_active=isActive,
        search_fields=("name", "email"),
        extra={"role": role},
    )
    rows, pagination = await query.fetch(User.all())
    return {"data": {"users": [user_to_dict(u) for u in rows], "pagination": pagination}}


@router.get("/stats")
async def user_stats():
    """
    Account statistics (admin only).

    recentRegistrations counts accounts created in the last 30 days.
    """
    since = timezone.now() - dt.timedelta(days=RECENT_REGISTRATION_DAYS)
    return {
        "data": {
            "total": await User.all().count(),
            "active": await User.filter(is_active=True).count(),
            "inactive": await User.filter(is_active=False).count(),
            "admins": await User.filter(role="admin").count(),
            "regular": await User.filter(role="user").count(),
            "recentRegistrations": await User.filter(created_at__gte=since).count(),
        }
    }


@router.get("/{user_id}")
async def get_user(user_id: uuid.UUID):
    u = await _get_user_or_404(user_id)
    return {"data": {"user": user_to_dict(u)}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreateIn):
    """
    Create an account on behalf of someone (admin only).

    Raises:
        Conflict (409): Email already registered
    """
    if await User.filter(email=body.email).exists():
        raise Conflict("Email already registered")

    u = User(name=body.name, email=body.email, role=body.role)
    u.set_password(body.password)
    await u.save()
    logger.info("[users] admin created user id=%s role=%s", u.id, u.role)
    return {"message": "User created successfully", "data": {"user": user_to_dict(u)}}


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdateIn,
    current_admin: User = Depends(require_admin),
):
    """
    Update another account's name, email, role or active flag (admin only).

    Only provided fields are changed. An admin cannot deactivate themselves.

    Raises:
        NotFound (404): User not found
        Conflict (409): Email already registered
        Forbidden (403): Cannot deactivate your own account
    """
    u = await _get_user_or_404(user_id)
    patch = body.patch()

    if patch.get("isActive") is False and _is_self(current_admin, u):
        raise Forbidden("Cannot deactivate your own account")

    if patch.get("email") and patch["email"] != u.email:
        if await User.filter(email=patch["email"]).exclude(id=u.id).exists():
            raise Conflict("Email already registered")
        u.email = patch["email"]
    if patch.get("name"):
        u.name = patch["name"]
    if patch.get("role"):
        u.role = patch["role"]
    if isinstance(patch.get("isActive"), bool):
        u.is_active = patch["isActive"]

    await u.save()
    return {"message": "User updated successfully", "data": {"user": user_to_dict(u)}}


@router.delete("/{user_id}")
async def delete_user(user_id: uuid.UUID, current_admin: User = Depends(require_admin)):
    """
    Delete an account (admin only).

    Raises:
        NotFound (404): User not found
        Forbidden (403): Cannot delete your own account
    """
    u = await _get_user_or_404(user_id)
    if _is_self(current_admin, u):
        raise Forbidden("Cannot delete your own account")

    await u.delete()
    logger.info("[users] admin %s deleted user id=%s", current_admin.id, user_id)
    return {"message": "User deleted successfully"}


@router.patch("/{user_id}/toggle-status")
async def toggle_user_status(user_id: uuid.UUID, current_admin: User = Depends(require_admin)):
    """
    Flip an account between active and inactive (admin only).

    Raises:
        NotFound (404): User not found
        Forbidden (403): Cannot deactivate your own account
    """
    u = await _get_user_or_404(user_id)
    if _is_self(current_admin, u):
        raise Forbidden("Cannot deactivate your own account")

    u.is_active = not u.is_active
    await u.save(update_fields=["is_active", "updated_at"])
    state = "activated" if u.is_active else "deactivated"
    return {"message": f"User {state} successfully", "data": {"user": user_to_dict(u)}}
