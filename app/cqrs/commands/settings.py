from __future__ import annotations

import json
import logging

from app.cqrs.queries.settings import DEFAULT_WHATSAPP, SETTINGS_KEY, settings_out
from app.db.connection import row_as_dict, run_transaction
from app.models.schemas import WhatsAppSettingsUpdate

logger = logging.getLogger(__name__)


def _locked_settings(cur) -> dict:
    cur.execute(
        """
        INSERT INTO content_blocks (key, data)
        VALUES (%s, %s::jsonb)
        ON CONFLICT (key) DO NOTHING
        """,
        (SETTINGS_KEY, json.dumps({"whatsapp": DEFAULT_WHATSAPP})),
    )
    cur.execute(
        "SELECT data, updated_at FROM content_blocks WHERE key = %s FOR UPDATE",
        (SETTINGS_KEY,),
    )
    return settings_out(row_as_dict(cur))


def get_or_create_settings() -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            return _locked_settings(cur)
        finally:
            cur.close()

    return run_transaction(_handler)


def update_whatsapp_settings(payload: WhatsAppSettingsUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True)

    def _handler(conn):
        cur = conn.cursor()
        try:
            current = _locked_settings(cur)
            whatsapp = {**current["whatsapp"], **changes}
            cur.execute(
                """
                UPDATE content_blocks
                SET data = %s::jsonb, updated_at = now()
                WHERE key = %s
                RETURNING data, updated_at
                """,
                (json.dumps({"whatsapp": whatsapp}), SETTINGS_KEY),
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return settings_out(row)

    result = run_transaction(_handler)
    logger.info("WhatsApp settings updated (%s)", ", ".join(sorted(changes)) or "no changes")
    return result


def send_test_message(phone_number: str) -> dict:
    """Check the WhatsApp configuration without contacting the provider."""
    whatsapp = get_or_create_settings()["whatsapp"]
    if not whatsapp.get("enabled"):
        return {"success": False, "message": "WhatsApp notifications are disabled"}
    if not whatsapp.get("api_key") or not whatsapp.get("phone_number_id"):
        return {"success": False, "message": "WhatsApp configuration is incomplete"}
    logger.info("Simulated WhatsApp test message to %s", phone_number)
    return {"success": True, "message": f"Test message sent to {phone_number}"}
