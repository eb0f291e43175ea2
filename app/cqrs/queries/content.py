from __future__ import annotations

import json
import uuid

from app.core.errors import NotFoundError
from app.db.connection import fetch_all, fetch_one

HERO = "hero"
PRIZE_CAROUSEL = "prize_carousel"
INFO_TICKER = "info_ticker"

BLOCK_LABELS = {
    HERO: "Hero content",
    PRIZE_CAROUSEL: "Prize carousel",
    INFO_TICKER: "Info ticker",
}

FAQ_COLUMNS = "id, question, answer, sort_order, is_active, created_at, updated_at"
PAYMENT_METHOD_COLUMNS = (
    "id, name, description, image_url, sort_order, is_active, created_at, updated_at"
)


def decode_data(data) -> dict:
    # pg8000 hands jsonb back already parsed; plain text columns come back as str.
    if isinstance(data, (str, bytes)):
        return json.loads(data)
    return dict(data or {})


def block_out(row: dict) -> dict:
    return {**decode_data(row["data"]), "updated_at": row["updated_at"]}


def find_block(key: str):
    return fetch_one("SELECT data, updated_at FROM content_blocks WHERE key = %s", (key,))


def get_block(key: str) -> dict:
    row = find_block(key)
    if not row:
        raise NotFoundError(f"{BLOCK_LABELS.get(key, key)} not found")
    return block_out(row)


def faq_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "question": row["question"],
        "answer": row["answer"],
        "order": row["sort_order"],
        "is_active": row["is_active"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def payment_method_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "description": row["description"],
        "image_url": row["image_url"],
        "order": row["sort_order"],
        "is_active": row["is_active"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def list_faqs(include_inactive: bool = False) -> list[dict]:
    where = "" if include_inactive else "WHERE is_active"
    rows = fetch_all(
        f"SELECT {FAQ_COLUMNS} FROM faqs {where} ORDER BY sort_order ASC, created_at ASC"
    )
    return [faq_out(row) for row in rows]


def get_faq(faq_id: uuid.UUID) -> dict:
    row = fetch_one(f"SELECT {FAQ_COLUMNS} FROM faqs WHERE id = %s", (faq_id,))
    if not row:
        raise NotFoundError(f"FAQ with ID {faq_id} not found")
    return faq_out(row)


def list_payment_methods(include_inactive: bool = False) -> list[dict]:
    where = "" if include_inactive else "WHERE is_active"
    rows = fetch_all(
        f"""
        SELECT {PAYMENT_METHOD_COLUMNS}
        FROM payment_methods
        {where}
        ORDER BY sort_order ASC, created_at ASC
        """
    )
    return [payment_method_out(row) for row in rows]


def get_payment_method(method_id: uuid.UUID) -> dict:
    row = fetch_one(
        f"SELECT {PAYMENT_METHOD_COLUMNS} FROM payment_methods WHERE id = %s", (method_id,)
    )
    if not row:
        raise NotFoundError(f"Payment method with ID {method_id} not found")
    return payment_method_out(row)


def _optional_block(key: str):
    try:
        return get_block(key)
    except NotFoundError:
        return None


def website_content() -> dict:
    """Everything the public landing page renders, in one payload."""
    return {
        "hero": _optional_block(HERO),
        "prize_carousel": _optional_block(PRIZE_CAROUSEL),
        "info_ticker": _optional_block(INFO_TICKER),
        "faqs": list_faqs(),
        "payment_methods": list_payment_methods(),
    }
