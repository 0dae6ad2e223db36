"""
Order QR codes.

The confirmation page shows a QR code with the payload ``ORDER:<number>``;
the admin scanner reads it back and completes that order.
"""

import io
import re

import qrcode
import qrcode.image.svg

from serb_burger.core.errors import ValidationFailed

QR_PREFIX = "ORDER:"
# Order numbers fit a 32-bit integer column
_PAYLOAD_RE = re.compile(r"^ORDER:(\d{1,9})$")


def encode_order(number: int) -> str:
    return f"{QR_PREFIX}{number}"


def decode_order(payload: str) -> int:
    """
    Extract the order number from a scanned payload.

    Raises:
        ValidationFailed: payload is not ``ORDER:<digits>``
    """
    match = _PAYLOAD_RE.match(payload.strip())
    if not match:
        raise ValidationFailed("Неверный QR-код заказа", details={"code": payload})
    return int(match.group(1))


def render_svg(number: int) -> bytes:
    """SVG image of the order QR code (high error correction)."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=2,
        image_factory=qrcode.image.svg.SvgPathImage,
    )
    qr.add_data(encode_order(number))
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image().save(buffer)
    return buffer.getvalue()
