from __future__ import annotations

import uuid
from typing import Optional

from app.core.errors import BadRequestError, NotFoundError
from app.cqrs.queries.common import page_offset, page_payload
from app.cqrs.queries.settings import whatsapp_number
from app.cqrs.queries.tickets import TICKET_COLUMNS, ticket_out
from app.db.connection import fetch_all, fetch_one, placeholders
from app.services.pricing import price_breakdown, purchase_message, whatsapp_link

RAFFLE_COLUMNS = (
    "id, name, prize, total_tickets, ticket_price, draw_method, is_active, created_at, updated_at"
)
PROMOTION_COLUMNS = "id, raffle_id, quantity, price, description, created_at, updated_at"


def raffle_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "prize": row["prize"],
        "total_tickets": row["total_tickets"],
        "ticket_price": row["ticket_price"],
        "draw_method": row["draw_method"],
        "is_active": row["is_active"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def promotion_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "raffle_id": str(row["raffle_id"]),
        "quantity": row["quantity"],
        "price": row["price"],
        "description": row["description"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def list_raffles() -> list[dict]:
    rows = fetch_all(f"SELECT {RAFFLE_COLUMNS} FROM raffles ORDER BY created_at DESC")
    return [raffle_out(row) for row in rows]


def list_raffles_paginated(page: int, limit: int) -> dict:
    offset = page_offset(page, limit)
    total = fetch_one("SELECT COUNT(*) AS total FROM raffles")
    rows = fetch_all(
        f"""
        SELECT {RAFFLE_COLUMNS}
        FROM raffles
        ORDER BY created_at DESC
        LIMIT %s OFFSET %s
        """,
        (limit, offset),
    )
    return page_payload([raffle_out(row) for row in rows], page, limit, total["total"])


def get_raffle(raffle_id: uuid.UUID) -> dict:
    row = fetch_one(f"SELECT {RAFFLE_COLUMNS} FROM raffles WHERE id = %s", (raffle_id,))
    if not row:
        raise NotFoundError(f"Raffle with ID {raffle_id} not found")
    return raffle_out(row)


def get_active_raffle() -> dict:
    row = fetch_one(
        f"""
        SELECT {RAFFLE_COLUMNS}
        FROM raffles
        WHERE is_active
        ORDER BY updated_at DESC
        LIMIT 1
        """
    )
    if not row:
        raise NotFoundError("No active raffle found")
    return raffle_out(row)


def list_promotions(raffle_id: uuid.UUID) -> list[dict]:
    rows = fetch_all(
        f"""
        SELECT {PROMOTION_COLUMNS}
        FROM promotions
        WHERE raffle_id = %s
        ORDER BY quantity ASC
        """,
        (raffle_id,),
    )
    return [promotion_out(row) for row in rows]


def get_promotion(promotion_id: uuid.UUID) -> dict:
    row = fetch_one(f"SELECT {PROMOTION_COLUMNS} FROM promotions WHERE id = %s", (promotion_id,))
    if not row:
        raise NotFoundError(f"Promotion with ID {promotion_id} not found")
    return promotion_out(row)


def get_active_raffle_details() -> dict:
    raffle = get_active_raffle()
    return {"raffle": raffle, "promotions": list_promotions(uuid.UUID(raffle["id"]))}


def get_active_raffle_with_tickets() -> dict:
    details = get_active_raffle_details()
    rows = fetch_all(
        f"SELECT {TICKET_COLUMNS} FROM tickets WHERE raffle_id = %s ORDER BY number ASC",
        (uuid.UUID(details["raffle"]["id"]),),
    )
    return {**details, "tickets": [ticket_out(row) for row in rows]}


def quote_tickets(
    raffle_id: uuid.UUID,
    ticket_numbers: list[str],
    buyer_name: Optional[str] = None,
    buyer_phone: Optional[str] = None,
) -> dict:
    if len(set(ticket_numbers)) != len(ticket_numbers):
        raise BadRequestError("Duplicate ticket numbers are not allowed")
    raffle = get_raffle(raffle_id)
    rows = fetch_all(
        f"""
        SELECT number
        FROM tickets
        WHERE raffle_id = %s AND number IN ({placeholders(ticket_numbers)})
        """,
        (raffle_id, *ticket_numbers),
    )
    found = {row["number"] for row in rows}
    missing = [number for number in ticket_numbers if number not in found]
    if missing:
        raise NotFoundError(
            {
                "message": f"Tickets not found in raffle {raffle_id}",
                "ticket_numbers": missing,
            }
        )

    breakdown = price_breakdown(
        len(ticket_numbers), raffle["ticket_price"], list_promotions(raffle_id)
    )
    message = purchase_message(
        ticket_numbers, breakdown["total_price"], buyer_name, buyer_phone
    )
    return {
        "raffle_id": raffle["id"],
        "ticket_numbers": sorted(ticket_numbers),
        **breakdown,
        "message": message,
        "whatsapp_url": whatsapp_link(whatsapp_number(), message),
    }
