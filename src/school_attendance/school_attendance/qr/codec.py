from __future__ import annotations

import io
from typing import BinaryIO, Optional

import qrcode
from PIL import Image


def render_token_png(data: str, *, box_size: int = 10, border: int = 2) -> io.BytesIO:
    """Render ``data`` as a QR code PNG, returned as a rewound buffer."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def decode_token_image(stream: BinaryIO) -> Optional[str]:
    """Read the first QR code found in an uploaded image, or None."""

    # pyzbar loads the zbar system library at import time.
    from pyzbar.pyzbar import decode as pyzbar_decode

    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
