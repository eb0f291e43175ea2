from decimal import Decimal
from urllib.parse import unquote

from app.services.pricing import (
    format_amount,
    price_breakdown,
    purchase_message,
    whatsapp_link,
)

PROMOTIONS = [
    {"quantity": 2, "price": Decimal("9000"), "description": "2 boletos"},
    {"quantity": 5, "price": Decimal("20000"), "description": "5 boletos"},
]


def test_breakdown_applies_largest_bundle_first():
    breakdown = price_breakdown(8, Decimal("5000"), PROMOTIONS)

    assert [(b["quantity"], b["count"]) for b in breakdown["bundles"]] == [(5, 1), (2, 1)]
    assert breakdown["singles"] == 1
    assert breakdown["total_price"] == Decimal("34000")


def test_breakdown_without_promotions():
    breakdown = price_breakdown(3, Decimal("5000"), [])

    assert breakdown["bundles"] == []
    assert breakdown["singles"] == 3
    assert breakdown["total_price"] == Decimal("15000")


def test_breakdown_below_smallest_bundle():
    breakdown = price_breakdown(1, Decimal("5000"), PROMOTIONS)

    assert breakdown["bundles"] == []
    assert breakdown["total_price"] == Decimal("5000")


def test_format_amount():
    assert format_amount(Decimal("34000")) == "34,000"
    assert format_amount(Decimal("12.5")) == "12.50"


def test_purchase_message_defaults():
    message = purchase_message(["002", "001"], Decimal("10000"))

    assert message.startswith("¡Hola! Soy cliente, mi teléfono es no proporcionado.")
    assert "001, 002" in message
    assert message.endswith("El total es $10,000.")


def test_whatsapp_link_encodes_message():
    link = whatsapp_link("+57 300 123 4567", "Hola, quiero 001 & 002")

    assert link.startswith("https://wa.me/573001234567?text=")
    assert " " not in link
    assert unquote(link.split("?text=", 1)[1]) == "Hola, quiero 001 & 002"


def test_whatsapp_link_requires_a_number():
    assert whatsapp_link("", "Hola") is None
    assert whatsapp_link(None, "Hola") is None
