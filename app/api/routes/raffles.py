import uuid

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import raffles as raffles_commands
from app.cqrs.queries import raffles as raffles_queries
from app.models.schemas import (
    ActiveRaffleDetails,
    ActiveRaffleWithTickets,
    OperationResult,
    PaginatedRaffles,
    PromotionCreate,
    PromotionOut,
    PromotionUpdate,
    QuoteRequest,
    QuoteResponse,
    RaffleCreate,
    RaffleOut,
    RaffleUpdate,
)

router = APIRouter(prefix="/raffles", tags=["raffles"])

can_read = Depends(require_capability(Capability.RAFFLES_READ))
can_write = Depends(require_capability(Capability.RAFFLES_WRITE))


@router.get("/active-details", response_model=ActiveRaffleDetails)
def active_details():
    require_db()
    return raffles_queries.get_active_raffle_details()


@router.get("/active-with-tickets", response_model=ActiveRaffleWithTickets)
def active_with_tickets():
    require_db()
    return raffles_queries.get_active_raffle_with_tickets()


@router.get("", response_model=list[RaffleOut], dependencies=[can_read])
def list_raffles():
    require_db()
    return raffles_queries.list_raffles()


@router.get("/paginated", response_model=PaginatedRaffles, dependencies=[can_read])
def list_raffles_paginated(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    require_db()
    return raffles_queries.list_raffles_paginated(page, limit)


@router.post("", response_model=RaffleOut, status_code=201, dependencies=[can_write])
def create_raffle(payload: RaffleCreate):
    require_db()
    return raffles_commands.create_raffle(payload)


@router.post("/promotions", response_model=PromotionOut, status_code=201, dependencies=[can_write])
def create_promotion(payload: PromotionCreate):
    require_db()
    return raffles_commands.create_promotion(payload)


@router.put("/promotions/{promotion_id}", response_model=PromotionOut, dependencies=[can_write])
def update_promotion(promotion_id: uuid.UUID, payload: PromotionUpdate):
    require_db()
    return raffles_commands.update_promotion(promotion_id, payload)


@router.delete(
    "/promotions/{promotion_id}", response_model=OperationResult, dependencies=[can_write]
)
def delete_promotion(promotion_id: uuid.UUID):
    require_db()
    return raffles_commands.delete_promotion(promotion_id)


@router.get("/{raffle_id}", response_model=RaffleOut, dependencies=[can_read])
def get_raffle(raffle_id: uuid.UUID):
    require_db()
    return raffles_queries.get_raffle(raffle_id)


@router.put("/{raffle_id}", response_model=RaffleOut, dependencies=[can_write])
def update_raffle(raffle_id: uuid.UUID, payload: RaffleUpdate):
    require_db()
    return raffles_commands.update_raffle(raffle_id, payload)


@router.delete("/{raffle_id}", response_model=OperationResult, dependencies=[can_write])
def delete_raffle(raffle_id: uuid.UUID):
    require_db()
    return raffles_commands.delete_raffle(raffle_id)


@router.get("/{raffle_id}/promotions", response_model=list[PromotionOut])
def list_promotions(raffle_id: uuid.UUID):
    require_db()
    return raffles_queries.list_promotions(raffle_id)


@router.post("/{raffle_id}/quote", response_model=QuoteResponse)
def quote(raffle_id: uuid.UUID, payload: QuoteRequest):
    require_db()
    return raffles_queries.quote_tickets(
        raffle_id, payload.ticket_numbers, payload.buyer_name, payload.buyer_phone
    )
