from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import db_configured
from app.core.errors import UnauthorizedError
from app.core.policy import Capability, ensure_capability
from app.core.security import decode_access_token
from app.cqrs.queries import users

bearer_scheme = HTTPBearer(auto_error=False)


def require_db() -> None:
    if not db_configured():
        raise HTTPException(status_code=500, detail="Database is not configured")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Not authenticated")
    claims = decode_access_token(credentials.credentials)
    require_db()
    return users.authenticated_user(claims)


def require_capability(capability: Capability):
    def _dependency(user: dict = Depends(get_current_user)) -> dict:
        ensure_capability(user, capability)
        return user

    return _dependency
