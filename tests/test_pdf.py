import uuid
from types import SimpleNamespace

import app.services.pdf as pdf


def test_verification_url_points_at_frontend(monkeypatch):
    monkeypatch.setattr(pdf, "settings", SimpleNamespace(frontend_url="https://rifas.example/"))

    assert pdf.verification_url("abc") == "https://rifas.example/verify?ticketId=abc"


def test_build_ticket_pdf_renders_document():
    ticket_id = str(uuid.uuid4())
    receipt = {
        "id": ticket_id,
        "number": "042",
        "raffle_name": "Moto 2024",
        "prize": "Una moto",
        "buyer_name": "Ana",
        "buyer_phone": None,
        "draw_method": "Lotería de Medellín",
    }

    data = pdf.build_ticket_pdf(receipt)

    assert data.startswith(b"%PDF")
    assert pdf.receipt_filename(receipt) == "boleto-042.pdf"
