import jwt
from fastapi import Depends, Header

from app.core.errors import Forbidden, Unauthorized
from app.core.security import decode_access_token
from app.models.user import User

async def get_current_user(
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Extracts and validates the JWT from the `Authorization: Bearer <token>` header.

    Returns:
        User: The authenticated user object from database

    Raises:
        Unauthorized (401): "Access token required" if no token is provided
        Unauthorized (401): "Token expired" if the token is past its expiry
        Unauthorized (401): "Invalid token" if the token is malformed or badly signed
        Unauthorized (401): "User not found" / "Account is deactivated"

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"data": {"id": str(user.id)}}
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()

    if not token:
        raise Unauthorized("Access token required")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")

    try:
        user = await User.get_or_none(id=user_id)
    except (ValueError, TypeError):
        # "sub" was signed by us but is not a UUID
        raise Unauthorized("Invalid token")
    if not user:
        raise Unauthorized("User not found")
    if not user.is_active:
        raise Unauthorized("Account is deactivated")
    return user

async def require_admin(current: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency to ensure the current user is an administrator.

    Builds on `get_current_user`; the role is read from the database record,
    never from the token claims.

    Raises:
        Forbidden (403): If user is not an admin
        Unauthorized (401): If user is not authenticated (from get_current_user)
    """
    if not current.is_admin:
        raise Forbidden("Admin access required")
    return current
