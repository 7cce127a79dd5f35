# app/core/security.py
"""
Credentials and bearer tokens.

Passwords are stored as Argon2 hashes (passlib). Access tokens are HS256 JWTs
carrying the user id as `sub` plus the role at issue time.
"""
import os
import datetime as dt
from pathlib import Path

import jwt  # PyJWT
from dotenv import load_dotenv
from passlib.context import CryptContext

load_dotenv(dotenv_path=Path(__file__).resolve().parents[2] / ".env")

# Argon2 is salted and memory-hard; its default cost is well above bcrypt's 12 rounds
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # Override in every deployed environment
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24h
JWT_ALG = "HS256"


def hash_password(plain: str) -> str:
    """Argon2 hash of `plain`. Handlers go through User.set_password() instead."""
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, role: str, expires_minutes: int | None = None) -> str:
    """
    Sign an access token for `user_id`.

    Args:
        user_id: User UUID as a string, stored in `sub`
        role: "user" or "admin". Informational only: admin checks re-read the
            role from the database
        expires_minutes: Lifetime override, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Claims: sub, role, iat, exp
    """
    lifetime = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    issued_at = dt.datetime.now(dt.timezone.utc)
    claims = {
        "sub": user_id,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + dt.timedelta(minutes=lifetime),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Verify signature and expiry, then return the claims.

    Raises:
        jwt.ExpiredSignatureError: token is past `exp`
        jwt.InvalidTokenError: malformed token or bad signature
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
