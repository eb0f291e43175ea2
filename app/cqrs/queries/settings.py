from __future__ import annotations

from typing import Optional

from app.core.config import settings
from app.cqrs.queries.content import decode_data, find_block

SETTINGS_KEY = "settings"

DEFAULT_WHATSAPP = {
    "enabled": False,
    "api_key": None,
    "phone_number_id": None,
    "from_phone_number": None,
    "notification_template": None,
}


def settings_out(row: dict) -> dict:
    data = decode_data(row["data"])
    return {
        "whatsapp": {**DEFAULT_WHATSAPP, **(data.get("whatsapp") or {})},
        "updated_at": row["updated_at"],
    }


def find_settings() -> Optional[dict]:
    row = find_block(SETTINGS_KEY)
    if not row:
        return None
    return settings_out(row)


def whatsapp_number() -> Optional[str]:
    """Number used for wa.me handoff links: stored settings first, then env."""
    stored = find_settings()
    if stored and stored["whatsapp"].get("from_phone_number"):
        return stored["whatsapp"]["from_phone_number"]
    return settings.whatsapp_number or None
