from __future__ import annotations

import uuid

from app.core.errors import NotFoundError, UnauthorizedError
from app.core.security import create_access_token, verify_password
from app.cqrs.queries.common import page_offset, page_payload
from app.db.connection import fetch_all, fetch_one
from app.models.schemas import LoginRequest

MAX_USERS_PAGE = 100

USER_COLUMNS = "id, username, role, full_name, email, is_active, created_at, updated_at"


def user_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "username": row["username"],
        "role": row["role"],
        "full_name": row.get("full_name"),
        "email": row.get("email"),
        "is_active": row["is_active"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def login_user(payload: LoginRequest) -> dict:
    row = fetch_one(
        f"""
        SELECT {USER_COLUMNS}, password_hash, password_salt
        FROM users
        WHERE username = %s
        """,
        (payload.username,),
    )
    if not row or not verify_password(payload.password, row["password_hash"], row["password_salt"]):
        raise UnauthorizedError("Invalid credentials")
    if not row["is_active"]:
        raise UnauthorizedError("User is inactive")
    user = user_out(row)
    token = create_access_token(user["id"], user["username"], user["role"])
    return {"user": user, "access_token": token, "token_type": "bearer"}


def get_user(user_id: uuid.UUID) -> dict:
    row = fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
    if not row:
        raise NotFoundError(f"User with ID {user_id} not found")
    return user_out(row)


def authenticated_user(claims: dict) -> dict:
    """Resolve token claims to a live, active user."""
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise UnauthorizedError("Invalid token") from exc
    row = fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
    if not row or not row["is_active"]:
        raise UnauthorizedError("User not found or inactive")
    return user_out(row)


def list_users_paginated(page: int, limit: int) -> dict:
    limit = min(limit, MAX_USERS_PAGE)
    offset = page_offset(page, limit)
    total = fetch_one("SELECT COUNT(*) AS total FROM users")
    rows = fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        ORDER BY created_at DESC
        LIMIT %s OFFSET %s
        """,
        (limit, offset),
    )
    return page_payload([user_out(row) for row in rows], page, limit, total["total"])