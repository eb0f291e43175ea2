from __future__ import annotations

import uuid
from typing import Optional

from app.core.errors import BadRequestError, NotFoundError
from app.cqrs.queries.common import page_offset, page_payload
from app.db.connection import fetch_all, fetch_one
from app.models.tickets import TicketStatus

TICKET_COLUMNS = (
    "id, raffle_id, number, status, buyer_name, buyer_email, buyer_phone, "
    "transaction_id, notes, created_at, updated_at"
)


def ticket_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "raffle_id": str(row["raffle_id"]),
        "number": row["number"],
        "status": row["status"],
        "buyer_name": row.get("buyer_name"),
        "buyer_email": row.get("buyer_email"),
        "buyer_phone": row.get("buyer_phone"),
        "transaction_id": row.get("transaction_id"),
        "notes": row.get("notes"),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def _ensure_raffle(raffle_id: uuid.UUID) -> dict:
    raffle = fetch_one(
        "SELECT id, name, prize, draw_method FROM raffles WHERE id = %s",
        (raffle_id,),
    )
    if not raffle:
        raise NotFoundError(f"Raffle with ID {raffle_id} not found")
    return raffle


def list_tickets(raffle_id: uuid.UUID) -> list[dict]:
    _ensure_raffle(raffle_id)
    rows = fetch_all(
        f"SELECT {TICKET_COLUMNS} FROM tickets WHERE raffle_id = %s ORDER BY number ASC",
        (raffle_id,),
    )
    return [ticket_out(row) for row in rows]


def list_tickets_paginated(
    raffle_id: uuid.UUID,
    page: int,
    limit: int,
    status: Optional[TicketStatus] = None,
) -> dict:
    offset = page_offset(page, limit)
    _ensure_raffle(raffle_id)
    where = "raffle_id = %s"
    params: list = [raffle_id]
    if status:
        where += " AND status = %s"
        params.append(TicketStatus(status).value)
    total = fetch_one(f"SELECT COUNT(*) AS total FROM tickets WHERE {where}", tuple(params))
    rows = fetch_all(
        f"""
        SELECT {TICKET_COLUMNS}
        FROM tickets
        WHERE {where}
        ORDER BY number ASC
        LIMIT %s OFFSET %s
        """,
        (*params, limit, offset),
    )
    return page_payload([ticket_out(row) for row in rows], page, limit, total["total"])


def list_tickets_by_status(raffle_id: uuid.UUID, status: TicketStatus) -> list[dict]:
    _ensure_raffle(raffle_id)
    rows = fetch_all(
        f"""
        SELECT {TICKET_COLUMNS}
        FROM tickets
        WHERE raffle_id = %s AND status = %s
        ORDER BY number ASC
        """,
        (raffle_id, TicketStatus(status).value),
    )
    return [ticket_out(row) for row in rows]


def get_ticket_by_number(raffle_id: uuid.UUID, number: str) -> dict:
    row = fetch_one(
        f"SELECT {TICKET_COLUMNS} FROM tickets WHERE raffle_id = %s AND number = %s",
        (raffle_id, number),
    )
    if not row:
        raise NotFoundError(f"Ticket number {number} not found in raffle {raffle_id}")
    return ticket_out(row)


def status_summary(raffle_id: uuid.UUID) -> dict:
    _ensure_raffle(raffle_id)
    rows = fetch_all(
        """
        SELECT status, COUNT(*) AS total
        FROM tickets
        WHERE raffle_id = %s
        GROUP BY status
        """,
        (raffle_id,),
    )
    summary = {status.value: 0 for status in TicketStatus}
    for row in rows:
        summary[row["status"]] = row["total"]
    return summary


def verify_ticket(ticket_id: str) -> dict:
    try:
        parsed = uuid.UUID(ticket_id)
    except ValueError as exc:
        raise BadRequestError("Invalid ticket ID format") from exc
    row = fetch_one(
        """
        SELECT t.id, t.raffle_id, t.number, t.status, t.buyer_name, t.buyer_email,
               t.buyer_phone, t.transaction_id, t.notes, t.created_at, t.updated_at,
               r.name AS raffle_name, r.prize
        FROM tickets t
        JOIN raffles r ON r.id = t.raffle_id
        WHERE t.id = %s
        """,
        (parsed,),
    )
    if not row:
        raise NotFoundError(f"Ticket with ID {ticket_id} not found")
    return {"ticket": ticket_out(row), "raffle_name": row["raffle_name"], "prize": row["prize"]}


def get_ticket_receipt(raffle_id: uuid.UUID, number: str) -> dict:
    """Ticket joined with the raffle fields printed on its receipt."""
    raffle = _ensure_raffle(raffle_id)
    ticket = get_ticket_by_number(raffle_id, number)
    return {
        **ticket,
        "raffle_name": raffle["name"],
        "prize": raffle["prize"],
        "draw_method": raffle["draw_method"],
    }
