from __future__ import annotations

import json
import logging
import uuid

from app.core.errors import BadRequestError, NotFoundError
from app.cqrs.queries.content import (
    BLOCK_LABELS,
    FAQ_COLUMNS,
    PAYMENT_METHOD_COLUMNS,
    block_out,
    decode_data,
    faq_out,
    payment_method_out,
)
from app.db.connection import placeholders, row_as_dict, rows_as_dicts, run_transaction
from app.models.schemas import (
    FAQCreate,
    FAQUpdate,
    PaymentMethodCreate,
    PaymentMethodUpdate,
)

logger = logging.getLogger(__name__)


def _to_columns(values: dict) -> dict:
    # API payloads call the position "order", which is reserved in SQL.
    columns = dict(values)
    if "order" in columns:
        columns["sort_order"] = columns.pop("order")
    return columns


def save_block(key: str, data: dict) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO content_blocks (key, data)
                VALUES (%s, %s::jsonb)
                ON CONFLICT (key) DO UPDATE
                SET data = EXCLUDED.data, updated_at = now()
                RETURNING data, updated_at
                """,
                (key, json.dumps(data)),
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return block_out(row)

    result = run_transaction(_handler)
    logger.info("Saved content block %s", key)
    return result


def patch_block(key: str, changes: dict) -> dict:
    if not changes:
        raise BadRequestError("No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("SELECT data FROM content_blocks WHERE key = %s FOR UPDATE", (key,))
            row = cur.fetchone()
            if not row:
                raise NotFoundError(f"{BLOCK_LABELS.get(key, key)} not found")
            merged = {**decode_data(row[0]), **changes}
            cur.execute(
                """
                UPDATE content_blocks
                SET data = %s::jsonb, updated_at = now()
                WHERE key = %s
                RETURNING data, updated_at
                """,
                (json.dumps(merged), key),
            )
            updated = row_as_dict(cur)
        finally:
            cur.close()
        return block_out(updated)

    return run_transaction(_handler)


def _insert_entry(table: str, columns_sql: str, values: dict, render) -> dict:
    columns = {"id": uuid.uuid4(), **_to_columns(values)}

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                f"""
                INSERT INTO {table} ({", ".join(columns)})
                VALUES ({placeholders(columns)})
                RETURNING {columns_sql}
                """,
                list(columns.values()),
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return render(row)

    return run_transaction(_handler)


def _update_entry(
    table: str, columns_sql: str, entry_id: uuid.UUID, values: dict, render, label: str
) -> dict:
    columns = _to_columns(values)
    if not columns:
        raise BadRequestError("No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        try:
            set_clauses = [f"{field} = %s" for field in columns]
            set_clauses.append("updated_at = now()")
            cur.execute(
                f"""
                UPDATE {table}
                SET {", ".join(set_clauses)}
                WHERE id = %s
                RETURNING {columns_sql}
                """,
                [*columns.values(), entry_id],
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        if not row:
            raise NotFoundError(f"{label} with ID {entry_id} not found")
        return render(row)

    return run_transaction(_handler)


def _delete_entry(table: str, entry_id: uuid.UUID, label: str) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(f"DELETE FROM {table} WHERE id = %s", (entry_id,))
            deleted = cur.rowcount
        finally:
            cur.close()
        if not deleted:
            raise NotFoundError(f"{label} with ID {entry_id} not found")
        return {"success": True, "message": f"{label} deleted"}

    return run_transaction(_handler)


def _reorder_entries(
    table: str, columns_sql: str, ordered_ids: list[uuid.UUID], render
) -> list[dict]:
    if len(set(ordered_ids)) != len(ordered_ids):
        raise BadRequestError("Duplicate IDs in reorder request")

    def _handler(conn):
        cur = conn.cursor()
        try:
            for position, entry_id in enumerate(ordered_ids):
                cur.execute(
                    f"UPDATE {table} SET sort_order = %s, updated_at = now() WHERE id = %s",
                    (position, entry_id),
                )
                if cur.rowcount != 1:
                    raise NotFoundError(f"Entry with ID {entry_id} not found")
            cur.execute(
                f"SELECT {columns_sql} FROM {table} ORDER BY sort_order ASC, created_at ASC"
            )
            rows = rows_as_dicts(cur)
        finally:
            cur.close()
        return [render(row) for row in rows]

    return run_transaction(_handler)


def create_faq(payload: FAQCreate) -> dict:
    return _insert_entry("faqs", FAQ_COLUMNS, payload.model_dump(), faq_out)


def update_faq(faq_id: uuid.UUID, payload: FAQUpdate) -> dict:
    return _update_entry(
        "faqs", FAQ_COLUMNS, faq_id, payload.model_dump(exclude_unset=True), faq_out, "FAQ"
    )


def delete_faq(faq_id: uuid.UUID) -> dict:
    return _delete_entry("faqs", faq_id, "FAQ")


def reorder_faqs(ordered_ids: list[uuid.UUID]) -> list[dict]:
    return _reorder_entries("faqs", FAQ_COLUMNS, ordered_ids, faq_out)


def create_payment_method(payload: PaymentMethodCreate) -> dict:
    return _insert_entry(
        "payment_methods", PAYMENT_METHOD_COLUMNS, payload.model_dump(), payment_method_out
    )


def update_payment_method(method_id: uuid.UUID, payload: PaymentMethodUpdate) -> dict:
    return _update_entry(
        "payment_methods",
        PAYMENT_METHOD_COLUMNS,
        method_id,
        payload.model_dump(exclude_unset=True),
        payment_method_out,
        "Payment method",
    )


def delete_payment_method(method_id: uuid.UUID) -> dict:
    return _delete_entry("payment_methods", method_id, "Payment method")


def reorder_payment_methods(ordered_ids: list[uuid.UUID]) -> list[dict]:
    return _reorder_entries(
        "payment_methods", PAYMENT_METHOD_COLUMNS, ordered_ids, payment_method_out
    )
