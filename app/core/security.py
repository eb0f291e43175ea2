from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import secrets
from typing import Optional

import jwt

from app.core.config import settings
from app.core.errors import UnauthorizedError


def hash_password(password: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 120_000)
    return digest.hex()


def new_password_hash(password: str) -> tuple[str, str]:
    salt = secrets.token_bytes(16)
    return hash_password(password, salt), salt.hex()


def verify_password(password: str, password_hash: str, salt_hex: str) -> bool:
    candidate = hash_password(password, bytes.fromhex(salt_hex))
    return secrets.compare_digest(password_hash, candidate)


def create_access_token(
    user_id: str,
    username: str,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    minutes = settings.jwt_expires_minutes if expires_minutes is None else expires_minutes
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Invalid token") from exc
    if not payload.get("sub"):
        raise UnauthorizedError("Invalid token")
    return payload
