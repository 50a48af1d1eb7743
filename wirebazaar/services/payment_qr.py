"""
UPI QR payments.

Orders are paid manually: the shopper scans a QR code that encodes a UPI
payment link, pays in their UPI app and then marks the payment as done.
"""

import logging
from io import BytesIO
from urllib.parse import quote, urlencode

import qrcode

from wirebazaar.core.config import settings

logger = logging.getLogger(__name__)


def build_upi_uri(amount: float, order_number: str) -> str:
    """
    `upi://pay` link for an order.

    pa: payee VPA, pn: payee name, am: amount in INR (2 decimals),
    cu: currency, tn: transaction note carrying the order number.
    """
    params = {
        "pa": settings.UPI_PAYEE_VPA,
        "pn": settings.UPI_PAYEE_NAME,
        "am": f"{amount:.2f}",
        "cu": "INR",
        "tn": f"Order {order_number}",
    }
    return "upi://pay?" + urlencode(params, quote_via=quote)


def render_qr_png(data: str, box_size: int = 10, border: int = 4) -> bytes:
    """Render a QR code as PNG bytes."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    logger.debug(f"Rendered QR code ({len(data)} chars of payload)")
    return buffer.getvalue()
