"""Typed errors raised by commands and queries.

The web layer turns every ``ServiceError`` into a JSON response carrying
``status_code``; nothing below the routes knows about HTTP.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    status_code = 500
    kind = "service"

    def __init__(self, detail: Any = None):
        self.detail = detail if detail is not None else self.__class__.__name__
        super().__init__(detail if isinstance(detail, str) else str(self.detail))


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"


class BadRequestError(ServiceError):
    status_code = 400
    kind = "bad_request"


class UnauthorizedError(ServiceError):
    status_code = 401
    kind = "unauthorized"


class ForbiddenError(ServiceError):
    status_code = 403
    kind = "forbidden"


class DataIntegrityError(ServiceError):
    """Stored data violates an invariant and needs manual intervention."""

    status_code = 409
    kind = "data_integrity"
