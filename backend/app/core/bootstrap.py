# app/core/bootstrap.py
"""
First-run setup: make sure the catalog can be administered.
"""
import os
import logging

from app.models.user import User

logger = logging.getLogger("uvicorn.error")


async def ensure_default_admin() -> None:
    """
    Create an admin account from the environment when none exists.

    Environment:
      ADMIN_PASSWORD  required; without it nothing is created
      ADMIN_EMAIL     default "admin@example.com"
      ADMIN_NAME      default "Administrator"

    If ADMIN_EMAIL already belongs to a regular account, that account is
    promoted (and reactivated) instead. Its password is left unchanged.
    """
    if await User.filter(role="admin").exists():
        return

    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        logger.warning("[bootstrap] no admin account and ADMIN_PASSWORD is unset -> skipping")
        return

    email = User.normalize_email(os.getenv("ADMIN_EMAIL", "admin@example.com"))
    name = os.getenv("ADMIN_NAME", "Administrator")

    existing = await User.get_or_none(email=email)
    if existing:
        existing.role = "admin"
        existing.is_active = True
        await existing.save(update_fields=["role", "is_active", "updated_at"])
        logger.warning("[bootstrap] promoted existing user to admin -> email=%s id=%s", existing.email, existing.id)
        return

    admin = User(name=name, email=email, role="admin")
    admin.set_password(password)
    await admin.save()
    logger.warning("[bootstrap] created default admin -> name=%s email=%s id=%s", admin.name, admin.email, admin.id)
