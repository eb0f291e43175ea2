from __future__ import annotations

from enum import Enum

MIN_NUMBER_WIDTH = 3

BUYER_FIELDS = ("buyer_name", "buyer_email", "buyer_phone", "transaction_id")


class TicketStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


# Sources each target status may be reached from. Resetting to available is
# always allowed.
_ALLOWED_SOURCES: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.AVAILABLE: frozenset(TicketStatus),
    TicketStatus.RESERVED: frozenset({TicketStatus.AVAILABLE}),
    TicketStatus.SOLD: frozenset({TicketStatus.AVAILABLE, TicketStatus.RESERVED}),
}


def allowed_sources(target: TicketStatus) -> frozenset[TicketStatus]:
    return _ALLOWED_SOURCES[TicketStatus(target)]


def can_transition(current: str, target: str) -> bool:
    return TicketStatus(current) in allowed_sources(TicketStatus(target))


def number_width(total_tickets: int) -> int:
    return max(MIN_NUMBER_WIDTH, len(str(max(total_tickets - 1, 0))))


def format_number(value: int, total_tickets: int) -> str:
    return str(value).zfill(number_width(total_tickets))


def pool_numbers(total_tickets: int) -> list[str]:
    return [format_number(value, total_tickets) for value in range(total_tickets)]
