"""
Pydantic schemas for admin user management endpoints.
"""
from typing import Literal, Optional

from app.schemas.common import Email, Password, PersonName, RequestModel

Role = Literal["admin", "user"]


class UserCreateIn(RequestModel):
    """Request model for admin-created accounts. Role defaults to "user"."""
    name: PersonName
    email: Email
    password: Password
    role: Role = "user"


class UserUpdateIn(RequestModel):
    """
    Request model for admin updates to another account.
    All fields are optional - only provided fields will be updated.
    """
    name: Optional[PersonName] = None
    email: Optional[Email] = None
    role: Optional[Role] = None
    isActive: Optional[bool] = None
