from __future__ import annotations

import logging
import uuid

from app.core.errors import BadRequestError, DataIntegrityError, NotFoundError
from app.cqrs.queries.tickets import TICKET_COLUMNS, ticket_out
from app.db.connection import (
    is_unique_violation,
    placeholders,
    row_as_dict,
    run_transaction,
)
from app.models.schemas import BuyerInfo, TicketUpdate
from app.models.tickets import (
    BUYER_FIELDS,
    TicketStatus,
    allowed_sources,
    can_transition,
    number_width,
)

logger = logging.getLogger(__name__)


def _require_distinct(numbers: list[str]) -> None:
    if not numbers:
        raise BadRequestError("At least one ticket number is required")
    if len(set(numbers)) != len(numbers):
        raise BadRequestError("Duplicate ticket numbers are not allowed")


def _ensure_raffle(cur, raffle_id: uuid.UUID, lock: bool = False) -> dict:
    sql = "SELECT id, name, total_tickets FROM raffles WHERE id = %s"
    if lock:
        sql += " FOR UPDATE"
    cur.execute(sql, (raffle_id,))
    raffle = row_as_dict(cur)
    if not raffle:
        raise NotFoundError(f"Raffle with ID {raffle_id} not found")
    return raffle


def _current_statuses(cur, raffle_id: uuid.UUID, numbers: list[str]) -> dict[str, str]:
    cur.execute(
        f"""
        SELECT number, status
        FROM tickets
        WHERE raffle_id = %s AND number IN ({placeholders(numbers)})
        """,
        [raffle_id, *numbers],
    )
    statuses = {row[0]: row[1] for row in cur.fetchall()}
    missing = [number for number in numbers if number not in statuses]
    if missing:
        raise NotFoundError(
            {
                "message": f"Tickets not found in raffle {raffle_id}",
                "ticket_numbers": missing,
            }
        )
    return statuses


def initialize_tickets(raffle_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            raffle = _ensure_raffle(cur, raffle_id, lock=True)
            total_tickets = raffle["total_tickets"]
            cur.execute("DELETE FROM tickets WHERE raffle_id = %s", (raffle_id,))
            deleted = cur.rowcount
            cur.execute(
                """
                INSERT INTO tickets (raffle_id, number, status)
                SELECT %s, lpad(n::text, %s::int, '0'), 'available'
                FROM generate_series(0, %s::int - 1) AS n
                """,
                (raffle_id, number_width(total_tickets), total_tickets),
            )
            created = cur.rowcount
        finally:
            cur.close()
        return {
            "raffle_id": str(raffle_id),
            "created": created,
            "deleted": deleted,
            "message": f"Initialized {created} tickets for raffle {raffle['name']}",
        }

    try:
        result = run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        logger.error("Duplicate ticket numbers while initializing raffle %s", raffle_id)
        raise DataIntegrityError(
            "Ticket numbers for this raffle collided while the pool was being rebuilt. "
            "Check the tickets table before initializing again."
        ) from exc
    logger.info(
        "Raffle %s initialized: %s tickets created, %s deleted",
        raffle_id,
        result["created"],
        result["deleted"],
    )
    return result


def reserve_tickets(raffle_id: uuid.UUID, ticket_numbers: list[str]) -> dict:
    _require_distinct(ticket_numbers)

    def _handler(conn):
        cur = conn.cursor()
        try:
            _ensure_raffle(cur, raffle_id)
            statuses = _current_statuses(cur, raffle_id, ticket_numbers)
            unavailable = [
                {"number": number, "status": statuses[number]}
                for number in ticket_numbers
                if statuses[number] != TicketStatus.AVAILABLE.value
            ]
            if unavailable:
                raise BadRequestError(
                    {"message": "Some tickets are not available", "tickets": unavailable}
                )
            cur.execute(
                f"""
                UPDATE tickets
                SET status = 'reserved', updated_at = now()
                WHERE raffle_id = %s
                  AND number IN ({placeholders(ticket_numbers)})
                  AND status = 'available'
                """,
                [raffle_id, *ticket_numbers],
            )
            modified = cur.rowcount
        finally:
            cur.close()
        # Another request reserved part of the batch first; rolling back keeps
        # the batch all-or-nothing.
        if modified != len(ticket_numbers):
            raise BadRequestError(
                f"Only {modified} of {len(ticket_numbers)} tickets could be reserved. Try again."
            )
        return {
            "raffle_id": str(raffle_id),
            "reserved": list(ticket_numbers),
            "message": f"Reserved {modified} tickets",
        }

    result = run_transaction(_handler)
    logger.info("Reserved tickets %s in raffle %s", ", ".join(ticket_numbers), raffle_id)
    return result


def complete_sale(raffle_id: uuid.UUID, ticket_numbers: list[str], buyer: BuyerInfo) -> dict:
    _require_distinct(ticket_numbers)

    def _handler(conn):
        cur = conn.cursor()
        try:
            _ensure_raffle(cur, raffle_id)
            statuses = _current_statuses(cur, raffle_id, ticket_numbers)
            already_sold = [
                number
                for number in ticket_numbers
                if statuses[number] == TicketStatus.SOLD.value
            ]
            if already_sold:
                raise BadRequestError(
                    {"message": "Some tickets are already sold", "ticket_numbers": already_sold}
                )
            cur.execute(
                f"""
                UPDATE tickets
                SET status = 'sold',
                    buyer_name = %s,
                    buyer_email = %s,
                    buyer_phone = %s,
                    transaction_id = %s,
                    updated_at = now()
                WHERE raffle_id = %s
                  AND number IN ({placeholders(ticket_numbers)})
                  AND status <> 'sold'
                """,
                [
                    buyer.name,
                    buyer.email,
                    buyer.phone,
                    buyer.transaction_id,
                    raffle_id,
                    *ticket_numbers,
                ],
            )
            modified = cur.rowcount
        finally:
            cur.close()
        if modified != len(ticket_numbers):
            raise BadRequestError(
                f"Only {modified} of {len(ticket_numbers)} tickets could be sold. "
                "Check that they are available or reserved."
            )
        return {
            "raffle_id": str(raffle_id),
            "sold": list(ticket_numbers),
            "modified_count": modified,
            "buyer": buyer.model_dump(),
            "message": f"Sold {modified} tickets",
        }

    result = run_transaction(_handler)
    logger.info(
        "Sold tickets %s in raffle %s to %s", ", ".join(ticket_numbers), raffle_id, buyer.name
    )
    return result


def bulk_update_status(
    raffle_id: uuid.UUID, ticket_numbers: list[str], status: TicketStatus
) -> dict:
    """Administrative override of the status of several tickets.

    Resetting to available applies to every listed ticket and clears the buyer
    fields. Other targets only touch tickets that may legally move there; the
    rest are reported as skipped.
    """
    _require_distinct(ticket_numbers)
    target = TicketStatus(status)
    sources = sorted(source.value for source in allowed_sources(target))
    assignments = ["status = %s", "updated_at = now()"]
    if target is TicketStatus.AVAILABLE:
        assignments.extend(f"{field} = NULL" for field in BUYER_FIELDS)

    def _handler(conn):
        cur = conn.cursor()
        try:
            _ensure_raffle(cur, raffle_id)
            cur.execute(
                f"""
                UPDATE tickets
                SET {", ".join(assignments)}
                WHERE raffle_id = %s
                  AND number IN ({placeholders(ticket_numbers)})
                  AND status IN ({placeholders(sources)})
                RETURNING number
                """,
                [target.value, raffle_id, *ticket_numbers, *sources],
            )
            updated = {row[0] for row in cur.fetchall()}
        finally:
            cur.close()
        return {
            "raffle_id": str(raffle_id),
            "status": target.value,
            "modified_count": len(updated),
            "ticket_numbers": [number for number in ticket_numbers if number in updated],
            "skipped": [number for number in ticket_numbers if number not in updated],
        }

    result = run_transaction(_handler)
    logger.info(
        "Bulk status update in raffle %s to %s: %s modified, %s skipped",
        raffle_id,
        target.value,
        result["modified_count"],
        len(result["skipped"]),
    )
    return result


def update_ticket(ticket_id: uuid.UUID, payload: TicketUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("SELECT status FROM tickets WHERE id = %s FOR UPDATE", (ticket_id,))
            row = cur.fetchone()
            if not row:
                raise NotFoundError(f"Ticket with ID {ticket_id} not found")
            current = row[0]
            target = changes.get("status") or current
            target = TicketStatus(target).value
            if target != current and not can_transition(current, target):
                raise BadRequestError(f"Invalid status transition: {current} -> {target}")
            changes["status"] = target
            if target == TicketStatus.AVAILABLE.value:
                for field in BUYER_FIELDS:
                    changes[field] = None

            set_clauses = [f"{field} = %s" for field in changes]
            set_clauses.append("updated_at = now()")
            cur.execute(
                f"""
                UPDATE tickets
                SET {", ".join(set_clauses)}
                WHERE id = %s
                RETURNING {TICKET_COLUMNS}
                """,
                [*changes.values(), ticket_id],
            )
            updated = row_as_dict(cur)
        finally:
            cur.close()
        return ticket_out(updated)

    return run_transaction(_handler)
