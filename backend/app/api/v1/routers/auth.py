# app/api/v1/routers/auth.py
import logging

from fastapi import APIRouter, Depends, status
from tortoise import timezone

from app.api.v1.deps import get_current_user
from app.api.v1.serializers import user_to_dict
from app.core.errors import BadRequest, Conflict, Unauthorized
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.auth import ChangePasswordIn, LoginRequest, ProfileUpdateIn, RegisterIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(user: User) -> str:
    return create_access_token(str(user.id), user.role)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new user account.

    Creates a regular ("user" role) account. The email is normalized
    (trimmed, lower-cased) before the uniqueness check, so "A@x.com " and
    "a@x.com" are the same account.

    Returns:
        dict: {"message", "data": {"user", "token"}} with status 201

    Raises:
        Conflict (409): Email already registered
    """
    if await User.filter(email=body.email).exists():
        raise Conflict("Email already registered")

    user = User(name=body.name, email=body.email, role="user")
    user.set_password(body.password)
    await user.save()
    logger.info("[auth] registered user id=%s", user.id)

    return {
        "message": "User registered successfully",
        "data": {"user": user_to_dict(user), "token": _issue_token(user)},
    }


@router.post("/login")
async def login(payload: LoginRequest):
    """
    Authenticate user and create access token.

    Validates credentials, rejects deactivated accounts, records the login
    time and returns a bearer token.

    Raises:
        Unauthorized (401): Invalid email or password / Account is deactivated
    """
    user = await User.get_or_none(email=payload.email)
    if not user or not user.check_password(payload.password):
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Unauthorized("Account is deactivated")

    user.last_login = timezone.now()
    await user.save(update_fields=["last_login"])

    return {
        "message": "Login successful",
        "data": {"user": user_to_dict(user), "token": _issue_token(user)},
    }


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return {"data": {"user": user_to_dict(user)}}


@router.put("/profile")
async def update_profile(body: ProfileUpdateIn, user: User = Depends(get_current_user)):
    """
    Update the caller's own name, email or password.

    Only provided fields are changed. A new password is hashed before storage.

    Raises:
        Conflict (409): Email already registered (by another account)
    """
    patch = body.patch()

    if patch.get("email") and patch["email"] != user.email:
        if await User.filter(email=patch["email"]).exclude(id=user.id).exists():
            raise Conflict("Email already registered")
        user.email = patch["email"]
    if patch.get("name"):
        user.name = patch["name"]
    if patch.get("password"):
        user.set_password(patch["password"])

    await user.save()
    return {"message": "Profile updated successfully", "data": {"user": user_to_dict(user)}}


@router.post("/change-password")
async def change_password(body: ChangePasswordIn, user: User = Depends(get_current_user)):
    """
    Change password for the currently authenticated user.

    Raises:
        BadRequest (400): Current password is incorrect
    """
    if not user.check_password(body.currentPassword):
        raise BadRequest("Current password is incorrect")

    user.set_password(body.newPassword)
    await user.save(update_fields=["password_hash", "updated_at"])
    return {"message": "Password changed successfully"}


@router.post("/refresh-token")
async def refresh_token(user: User = Depends(get_current_user)):
    """
    Issue a fresh token for an authenticated, active user.

    Inactive or deleted users never reach this handler (get_current_user rejects them).
    """
    return {"message": "Token refreshed successfully", "data": {"token": _issue_token(user)}}
