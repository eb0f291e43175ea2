from __future__ import annotations

from decimal import Decimal
import re
from typing import Optional
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me"


def price_breakdown(quantity: int, unit_price: Decimal, promotions: list[dict]) -> dict:
    """Split ``quantity`` tickets into promotion bundles and single tickets.

    Bundles are applied greedily from the largest quantity down; whatever is
    left is charged at the unit price.
    """
    remaining = quantity
    total = Decimal("0")
    bundles = []
    for promotion in sorted(promotions, key=lambda item: item["quantity"], reverse=True):
        size = promotion["quantity"]
        count = remaining // size
        if count <= 0:
            continue
        price = Decimal(promotion["price"])
        bundles.append(
            {
                "quantity": size,
                "price": price,
                "count": count,
                "description": promotion["description"],
            }
        )
        total += price * count
        remaining -= size * count
    unit_price = Decimal(unit_price)
    total += unit_price * remaining
    return {
        "quantity": quantity,
        "unit_price": unit_price,
        "singles": remaining,
        "bundles": bundles,
        "total_price": total,
    }


def format_amount(value: Decimal) -> str:
    value = Decimal(value)
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def purchase_message(
    ticket_numbers: list[str],
    total_price: Decimal,
    buyer_name: Optional[str] = None,
    buyer_phone: Optional[str] = None,
) -> str:
    numbers = ", ".join(sorted(ticket_numbers))
    return (
        f"¡Hola! Soy {buyer_name or 'cliente'}, mi teléfono es {buyer_phone or 'no proporcionado'}. "
        f"Me interesan los siguientes números para la rifa: {numbers}. "
        f"El total es ${format_amount(total_price)}."
    )


def whatsapp_link(phone_number: Optional[str], message: str) -> Optional[str]:
    if not phone_number:
        return None
    digits = re.sub(r"\D", "", phone_number)
    if not digits:
        return None
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message)}"
