from __future__ import annotations

from datetime import datetime, timezone
import logging

from app.core.errors import ServiceError
from app.db.connection import run_transaction
from app.db.schema import ensure_schema

logger = logging.getLogger(__name__)


def run_migrations() -> dict:
    try:
        run_transaction(ensure_schema)
    except Exception as exc:
        logger.exception("Schema migration failed")
        raise ServiceError("Migration failed. Check logs.") from exc
    logger.info("Schema is up to date")
    return {"status": "ok", "applied_at": datetime.now(timezone.utc)}
