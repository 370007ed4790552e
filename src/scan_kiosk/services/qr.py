"""QR code rendering utility."""

import base64
import io

import qrcode
from qrcode.image.pure import PyPNGImage

# Large modules and a thin quiet zone print crisply on the poster.
BOX_SIZE = 10
BORDER = 1


def make_qr_png(text: str) -> bytes:
    """Render ``text`` as a PNG QR code with medium error correction."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=BOX_SIZE,
        border=BORDER,
        image_factory=PyPNGImage,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image()
    buffer = io.BytesIO()
    img.save(buffer)
    return buffer.getvalue()


def make_qr_data_url(text: str) -> str:
    """Return the QR code for ``text`` as a ``data:image/png`` URL."""
    encoded = base64.b64encode(make_qr_png(text)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
