"""Declarative authorization policy.

Every protected endpoint names the capability it needs; roles map to a fixed
set of capabilities. Ownership rules ("admin or the user themself") live here
too so route handlers stay free of inline role checks.
"""

from __future__ import annotations

from enum import Enum

from app.core.errors import ForbiddenError


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
    SELLER = "seller"


class Capability(str, Enum):
    RAFFLES_READ = "raffles:read"
    RAFFLES_WRITE = "raffles:write"
    TICKETS_READ = "tickets:read"
    TICKETS_SELL = "tickets:sell"
    TICKETS_MANAGE = "tickets:manage"
    CONTENT_WRITE = "content:write"
    UPLOADS_WRITE = "uploads:write"
    USERS_MANAGE = "users:manage"
    SETTINGS_MANAGE = "settings:manage"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.SELLER: frozenset(
        {Capability.RAFFLES_READ, Capability.TICKETS_READ, Capability.TICKETS_SELL}
    ),
    Role.USER: frozenset({Capability.RAFFLES_READ, Capability.TICKETS_READ}),
}


def capabilities_for(role: str) -> frozenset[Capability]:
    try:
        return ROLE_CAPABILITIES[Role(role)]
    except ValueError:
        return frozenset()


def has_capability(user: dict, capability: Capability) -> bool:
    return capability in capabilities_for(user.get("role", ""))


def ensure_capability(user: dict, capability: Capability) -> None:
    if not has_capability(user, capability):
        raise ForbiddenError(f"Missing permission: {capability.value}")


def ensure_self_or_capability(user: dict, target_user_id: str, capability: Capability) -> None:
    if str(user.get("id")) == str(target_user_id):
        return
    ensure_capability(user, capability)


PRIVILEGED_USER_FIELDS = ("role", "is_active")


def restrict_user_changes(user: dict, changes: dict, strict: bool = True) -> dict:
    """Guard the fields only user managers may change (role, active flag).

    With ``strict`` a privileged field is rejected, otherwise it is dropped.
    """
    if has_capability(user, Capability.USERS_MANAGE):
        return changes
    privileged = [name for name in PRIVILEGED_USER_FIELDS if name in changes]
    if privileged and strict:
        raise ForbiddenError("Not allowed to change role or active flag")
    return {key: value for key, value in changes.items() if key not in privileged}
