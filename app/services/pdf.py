from __future__ import annotations

from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from reportlab.lib.colors import HexColor, black
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.core.config import settings

# Roughly the size of a printed raffle stub, in points.
TICKET_PAGE_SIZE = (302, 520)
BRAND_NAME = "Rifas Los Andes"
QR_SIZE = 110
MARGIN_X = 25
MAX_VALUE_CHARS = 38


def verification_url(ticket_id: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/verify?ticketId={ticket_id}"


def _qr_image(data: str) -> ImageReader:
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_H, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)
    return ImageReader(buffer)


def receipt_filename(receipt: dict) -> str:
    return f"boleto-{receipt['number']}.pdf"


def build_ticket_pdf(receipt: dict) -> bytes:
    """Render one sold ticket as a stub with a verification QR code.

    ``receipt`` is a ticket row plus ``raffle_name``, ``prize`` and
    ``draw_method``.
    """
    buffer = BytesIO()
    width, height = TICKET_PAGE_SIZE
    pdf = canvas.Canvas(buffer, pagesize=TICKET_PAGE_SIZE)
    pdf.setTitle(f"{BRAND_NAME} - Boleto #{receipt['number']}")

    pdf.setStrokeColor(HexColor("#555555"))
    pdf.setLineWidth(1.5)
    pdf.roundRect(12, 12, width - 24, height - 24, 5, stroke=1, fill=0)

    y = height - 45
    pdf.setFillColor(black)
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(width / 2, y, BRAND_NAME)
    y -= 18
    pdf.setFont("Helvetica", 10)
    pdf.drawCentredString(width / 2, y, "¡Gracias por tu compra!")
    y -= 14
    pdf.setStrokeColor(HexColor("#cccccc"))
    pdf.setLineWidth(0.5)
    pdf.line(MARGIN_X, y, width - MARGIN_X, y)

    y -= 32
    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawCentredString(width / 2, y, f"Boleto #{receipt['number']}")

    y -= 30
    details = (
        ("Rifa:", receipt.get("raffle_name")),
        ("Premio:", receipt.get("prize")),
        ("Comprador:", receipt.get("buyer_name")),
        ("Teléfono:", receipt.get("buyer_phone")),
        ("Sorteo:", receipt.get("draw_method")),
    )
    for label, value in details:
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(MARGIN_X, y, label)
        pdf.setFont("Helvetica", 10)
        text = str(value or "N/A")[:MAX_VALUE_CHARS]
        pdf.drawString(MARGIN_X + pdf.stringWidth(label, "Helvetica-Bold", 10) + 4, y, text)
        y -= 18

    y -= QR_SIZE
    pdf.drawImage(
        _qr_image(verification_url(receipt["id"])),
        (width - QR_SIZE) / 2,
        y,
        width=QR_SIZE,
        height=QR_SIZE,
    )
    y -= 14
    pdf.setFont("Helvetica-Oblique", 8)
    pdf.setFillColor(HexColor("#333333"))
    pdf.drawCentredString(width / 2, y, "Escanea para verificar tu boleto")

    pdf.setFont("Helvetica", 7)
    pdf.drawCentredString(width / 2, 28, "¡Mucha suerte!")

    pdf.showPage()
    pdf.save()
    buffer.seek(0)
    return buffer.getvalue()
