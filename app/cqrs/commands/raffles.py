from __future__ import annotations

import logging
import uuid

from app.core.errors import BadRequestError, NotFoundError
from app.cqrs.queries.raffles import PROMOTION_COLUMNS, RAFFLE_COLUMNS, promotion_out, raffle_out
from app.db.connection import (
    is_unique_violation,
    row_as_dict,
    run_transaction,
    violated_constraint,
)
from app.models.schemas import PromotionCreate, PromotionUpdate, RaffleCreate, RaffleUpdate

logger = logging.getLogger(__name__)

# Partial unique index that keeps at most one raffle active.
ACTIVE_RAFFLE_INDEX = "raffles_single_active_idx"


def _deactivate_others(cur, raffle_id: uuid.UUID) -> None:
    cur.execute(
        """
        UPDATE raffles
        SET is_active = false, updated_at = now()
        WHERE is_active AND id <> %s
        """,
        (raffle_id,),
    )
    if cur.rowcount:
        logger.info("Deactivated %s raffle(s) in favour of %s", cur.rowcount, raffle_id)


def _conflict(exc: Exception, name) -> BadRequestError:
    if violated_constraint(exc) == ACTIVE_RAFFLE_INDEX:
        return BadRequestError("Another raffle was activated at the same time. Try again.")
    return BadRequestError(f"A raffle named '{name}' already exists")


def create_raffle(payload: RaffleCreate) -> dict:
    raffle_id = uuid.uuid4()

    def _handler(conn):
        cur = conn.cursor()
        try:
            if payload.is_active:
                _deactivate_others(cur, raffle_id)
            cur.execute(
                f"""
                INSERT INTO raffles (
                    id, name, prize, total_tickets, ticket_price, draw_method, is_active
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {RAFFLE_COLUMNS}
                """,
                (
                    raffle_id,
                    payload.name,
                    payload.prize,
                    payload.total_tickets,
                    payload.ticket_price,
                    payload.draw_method,
                    payload.is_active,
                ),
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return raffle_out(row)

    try:
        raffle = run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        raise _conflict(exc, payload.name) from exc
    logger.info("Created raffle %s (%s)", raffle["id"], raffle["name"])
    return raffle


def update_raffle(raffle_id: uuid.UUID, payload: RaffleUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("SELECT id FROM raffles WHERE id = %s FOR UPDATE", (raffle_id,))
            if not cur.fetchone():
                raise NotFoundError(f"Raffle with ID {raffle_id} not found")
            if changes.get("is_active"):
                _deactivate_others(cur, raffle_id)

            set_clauses = [f"{field} = %s" for field in changes]
            set_clauses.append("updated_at = now()")
            cur.execute(
                f"""
                UPDATE raffles
                SET {", ".join(set_clauses)}
                WHERE id = %s
                RETURNING {RAFFLE_COLUMNS}
                """,
                [*changes.values(), raffle_id],
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return raffle_out(row)

    try:
        return run_transaction(_handler)
    except Exception as exc:
        if not is_unique_violation(exc):
            raise
        raise _conflict(exc, changes.get("name")) from exc


def delete_raffle(raffle_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("DELETE FROM raffles WHERE id = %s", (raffle_id,))
            deleted = cur.rowcount
        finally:
            cur.close()
        if not deleted:
            raise NotFoundError(f"Raffle with ID {raffle_id} not found")
        return {"success": True, "message": f"Raffle {raffle_id} deleted"}

    result = run_transaction(_handler)
    logger.info("Deleted raffle %s with its tickets and promotions", raffle_id)
    return result


def create_promotion(payload: PromotionCreate) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("SELECT id FROM raffles WHERE id = %s", (payload.raffle_id,))
            if not cur.fetchone():
                raise NotFoundError(f"Raffle with ID {payload.raffle_id} not found")
            cur.execute(
                f"""
                INSERT INTO promotions (id, raffle_id, quantity, price, description)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {PROMOTION_COLUMNS}
                """,
                (
                    uuid.uuid4(),
                    payload.raffle_id,
                    payload.quantity,
                    payload.price,
                    payload.description,
                ),
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        return promotion_out(row)

    return run_transaction(_handler)


def update_promotion(promotion_id: uuid.UUID, payload: PromotionUpdate) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        try:
            set_clauses = [f"{field} = %s" for field in changes]
            set_clauses.append("updated_at = now()")
            cur.execute(
                f"""
                UPDATE promotions
                SET {", ".join(set_clauses)}
                WHERE id = %s
                RETURNING {PROMOTION_COLUMNS}
                """,
                [*changes.values(), promotion_id],
            )
            row = row_as_dict(cur)
        finally:
            cur.close()
        if not row:
            raise NotFoundError(f"Promotion with ID {promotion_id} not found")
        return promotion_out(row)

    return run_transaction(_handler)


def delete_promotion(promotion_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("DELETE FROM promotions WHERE id = %s", (promotion_id,))
            deleted = cur.rowcount
        finally:
            cur.close()
        if not deleted:
            raise NotFoundError(f"Promotion with ID {promotion_id} not found")
        return {"success": True, "message": f"Promotion {promotion_id} deleted"}

    return run_transaction(_handler)
