"""
Pydantic schemas for authentication endpoints.
Defines request models for registration, login, profile and password changes.
"""
from typing import Annotated, Optional

from pydantic import AfterValidator

from app.schemas.common import Email, Password, PersonName, RequestModel


def _required(value: str) -> str:
    if not value:
        raise ValueError("Password is required")
    return value


class RegisterIn(RequestModel):
    """
    Request model for public self-registration.
    The account is always created with role "user".
    """
    name: PersonName
    email: Email
    password: Password  # Plain text, hashed server-side before storage


class LoginRequest(RequestModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    email: Email
    password: Annotated[str, AfterValidator(_required)]


class ProfileUpdateIn(RequestModel):
    """
    Request model for updating the caller's own profile.
    All fields are optional - only provided fields will be updated.
    """
    name: Optional[PersonName] = None
    email: Optional[Email] = None
    password: Optional[Password] = None


class ChangePasswordIn(RequestModel):
    """
    Request model for changing the caller's password.
    The current password must be supplied and is verified before the change.
    """
    currentPassword: Annotated[str, AfterValidator(_required)]
    newPassword: Password
