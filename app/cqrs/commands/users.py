from __future__ import annotations

import logging
import uuid
from typing import Optional

from app.core.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.core.policy import Role
from app.core.security import new_password_hash, verify_password
from app.cqrs.queries.users import USER_COLUMNS, user_out
from app.db.connection import is_unique_violation, row_as_dict, run_transaction
from app.models.schemas import UserRegister

logger = logging.getLogger(__name__)


def _duplicate_username(username) -> BadRequestError:
    return BadRequestError(f"Username '{username}' is already taken")


def _insert_user(cur, payload: UserRegister) -> dict:
    password_hash, salt = new_password_hash(payload.password)
    cur.execute(
        f"""
        INSERT INTO users (
            id, username, password_hash, password_salt, role, full_name, email
        ) VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING {USER_COLUMNS}
        """,
        (
            uuid.uuid4(),
            payload.username,
            password_hash,
            salt,
            Role(payload.role).value,
            payload.full_name,
            payload.email,
        ),
    )
    return user_out(row_as_dict(cur))


def register_user(payload: UserRegister) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            return _insert_user(cur, payload)
        finally:
            cur.close()

    try:
        user = run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        raise _duplicate_username(payload.username) from exc
    logger.info("Registered user %s with role %s", user["username"], user["role"])
    return user


def update_user(user_id: uuid.UUID, changes: dict) -> dict:
    """Apply already-authorized changes; a ``password`` entry is re-hashed."""
    changes = dict(changes)
    if not changes:
        raise BadRequestError("No fields to update")
    password = changes.pop("password", None)
    if password:
        changes["password_hash"], changes["password_salt"] = new_password_hash(password)
    if "role" in changes:
        changes["role"] = Role(changes["role"]).value

    def _handler(conn):
        cur = conn.cursor()
        try:
            set_clauses = [f"{field} = %s" for field in changes]
            set_clauses.append("updated_at = now()")
            cur.execute(
                f"""
                UPDATE users
                SET {", ".join(set_clauses)}
                WHERE id = %s
                RETURNING {USER_COLUMNS}
                """,
                [*changes.values(), user_id],
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        if not row:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user_out(row)

    try:
        return run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        raise _duplicate_username(changes.get("username")) from exc


def delete_user(user_id: uuid.UUID, actor_id: str) -> dict:
    if str(user_id) == str(actor_id):
        raise BadRequestError("You cannot delete your own account")

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
            deleted = cur.rowcount
        finally:
            cur.close()
        if not deleted:
            raise NotFoundError(f"User with ID {user_id} not found")
        return {"success": True, "message": "User deleted"}

    result = run_transaction(_handler)
    logger.info("User %s deleted by %s", user_id, actor_id)
    return result


def change_password(user_id: uuid.UUID, current_password: str, new_password: str) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT password_hash, password_salt FROM users WHERE id = %s FOR UPDATE",
                (user_id,),
            )
            row = cur.fetchone()
            if not row:
                raise NotFoundError(f"User with ID {user_id} not found")
            if not verify_password(current_password, row[0], row[1]):
                raise UnauthorizedError("Current password is incorrect")
            password_hash, salt = new_password_hash(new_password)
            cur.execute(
                """
                UPDATE users
                SET password_hash = %s, password_salt = %s, updated_at = now()
                WHERE id = %s
                """,
                (password_hash, salt, user_id),
            )
        finally:
            cur.close()
        return {"success": True, "message": "Password updated"}

    return run_transaction(_handler)


def ensure_initial_admin(username: str, password: Optional[str]) -> Optional[dict]:
    """Create the first admin account unless an admin already exists.

    Returns the new user, or None when nothing was created.
    """
    if not password:
        raise BadRequestError("An admin password is required")
    payload = UserRegister(username=username, password=password, role=Role.ADMIN)

    def _handler(conn):
        cur = conn.cursor()
        try:
            # Serializes concurrent bootstraps; released at commit.
            cur.execute("SELECT pg_advisory_xact_lock(hashtext('rifas-initial-admin'))")
            cur.execute("SELECT id FROM users WHERE role = 'admin' LIMIT 1")
            if cur.fetchone():
                return None
            return _insert_user(cur, payload)
        finally:
            cur.close()

    try:
        user = run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        raise _duplicate_username(username) from exc
    if user:
        logger.info("Initial admin %s created", user["username"])
    else:
        logger.info("Admin account already present, skipping bootstrap")
    return user
