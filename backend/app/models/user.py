"""
Database model for users.
Represents a user account in the system, containing authentication credentials,
profile information, and role-based access control.
"""
import uuid
from tortoise import fields, models

from app.core.security import hash_password, verify_password
from app.models.base import TimestampMixin

ROLES = ("admin", "user")


class User(TimestampMixin, models.Model):
    """
    User database model.

    Security:
    - Password is stored as an argon2 hash and only ever set through set_password()
    - Email must be unique across all users (stored trimmed and lower-cased)
    - Role determines access level (user vs admin)
    - Inactive users cannot log in or use existing tokens
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    name = fields.CharField(max_length=100)  # Display name
    email = fields.CharField(
        max_length=100,
        unique=True,
        index=True
    )  # Login identifier (must be unique, indexed for fast lookups)
    password_hash = fields.CharField(max_length=255)  # Hashed password (never store plain text)
    role = fields.CharField(max_length=16, default="user")  # User role: "user" (default) or "admin" (administrator)
    is_active = fields.BooleanField(default=True)  # Deactivated accounts cannot log in
    last_login = fields.DatetimeField(null=True)  # Updated on every successful login

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    def set_password(self, plain: str) -> None:
        """Hash and assign a new password. The only way a password is stored."""
        self.password_hash = hash_password(plain)

    def check_password(self, plain: str) -> bool:
        return verify_password(plain, self.password_hash)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
