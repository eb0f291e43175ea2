import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.api.dependencies import require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import tickets as tickets_commands
from app.cqrs.queries import tickets as tickets_queries
from app.models.schemas import (
    BulkStatusResponse,
    BulkStatusUpdate,
    InitializeResponse,
    PaginatedTickets,
    ReservationResponse,
    SaleRequest,
    SaleResponse,
    StatusSummary,
    TicketNumbersRequest,
    TicketOut,
    TicketUpdate,
    TicketVerification,
)
from app.models.tickets import TicketStatus
from app.services import pdf

router = APIRouter(prefix="/tickets", tags=["tickets"])

can_read = Depends(require_capability(Capability.TICKETS_READ))
can_sell = Depends(require_capability(Capability.TICKETS_SELL))
can_manage = Depends(require_capability(Capability.TICKETS_MANAGE))


@router.get("/raffle/{raffle_id}/status", response_model=StatusSummary)
def status_summary(raffle_id: uuid.UUID):
    require_db()
    return tickets_queries.status_summary(raffle_id)


@router.get("/raffle/{raffle_id}/available", response_model=list[TicketOut])
def available_tickets(raffle_id: uuid.UUID):
    require_db()
    return tickets_queries.list_tickets_by_status(raffle_id, TicketStatus.AVAILABLE)


@router.post("/raffle/{raffle_id}/reserve", response_model=ReservationResponse)
def reserve_tickets(raffle_id: uuid.UUID, payload: TicketNumbersRequest):
    require_db()
    return tickets_commands.reserve_tickets(raffle_id, payload.ticket_numbers)


@router.get("/verify/{ticket_id}", response_model=TicketVerification)
def verify_ticket(ticket_id: str):
    require_db()
    return tickets_queries.verify_ticket(ticket_id)


@router.post(
    "/raffle/{raffle_id}/initialize", response_model=InitializeResponse, dependencies=[can_manage]
)
def initialize_tickets(raffle_id: uuid.UUID):
    require_db()
    return tickets_commands.initialize_tickets(raffle_id)


@router.get("/raffle/{raffle_id}", response_model=list[TicketOut], dependencies=[can_read])
def list_tickets(raffle_id: uuid.UUID):
    require_db()
    return tickets_queries.list_tickets(raffle_id)


@router.get(
    "/raffle/{raffle_id}/paginated", response_model=PaginatedTickets, dependencies=[can_read]
)
def list_tickets_paginated(
    raffle_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[TicketStatus] = Query(None),
):
    require_db()
    return tickets_queries.list_tickets_paginated(raffle_id, page, limit, status)


@router.get(
    "/raffle/{raffle_id}/status/{status}", response_model=list[TicketOut], dependencies=[can_read]
)
def list_tickets_by_status(raffle_id: uuid.UUID, status: TicketStatus):
    require_db()
    return tickets_queries.list_tickets_by_status(raffle_id, status)


@router.get(
    "/raffle/{raffle_id}/number/{number}", response_model=TicketOut, dependencies=[can_read]
)
def get_ticket(raffle_id: uuid.UUID, number: str):
    require_db()
    return tickets_queries.get_ticket_by_number(raffle_id, number)


@router.get("/raffle/{raffle_id}/number/{number}/pdf", dependencies=[can_read])
def ticket_pdf(raffle_id: uuid.UUID, number: str):
    require_db()
    receipt = tickets_queries.get_ticket_receipt(raffle_id, number)
    return Response(
        content=pdf.build_ticket_pdf(receipt),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf.receipt_filename(receipt)}"'},
    )


@router.put(
    "/raffle/{raffle_id}/status", response_model=BulkStatusResponse, dependencies=[can_manage]
)
def bulk_update_status(raffle_id: uuid.UUID, payload: BulkStatusUpdate):
    require_db()
    return tickets_commands.bulk_update_status(raffle_id, payload.ticket_numbers, payload.status)


@router.post(
    "/raffle/{raffle_id}/complete-sale", response_model=SaleResponse, dependencies=[can_sell]
)
def complete_sale(raffle_id: uuid.UUID, payload: SaleRequest):
    require_db()
    return tickets_commands.complete_sale(raffle_id, payload.ticket_numbers, payload.buyer)


@router.put("/{ticket_id}", response_model=TicketOut, dependencies=[can_manage])
def update_ticket(ticket_id: uuid.UUID, payload: TicketUpdate):
    require_db()
    return tickets_commands.update_ticket(ticket_id, payload)
