"""QR code rendering for QRIS payloads."""

import base64
from io import BytesIO

import qrcode
from PIL import Image

from orderkuota.config import QrImageConfig
from orderkuota.errors import ErrorCode, OrderKuotaError

# Kept as its own name so callers do not need to know about config.py
QrImageOptions = QrImageConfig


def render_png(qris_string: str, options: QrImageOptions | None = None) -> bytes:
    """Render a payload to PNG bytes, resized to options.width square."""
    if not qris_string or not qris_string.strip():
        raise OrderKuotaError(
            "QRIS string cannot be empty",
            ErrorCode.INVALID_QRIS_STRING,
        )
    options = options or QrImageOptions()

    try:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=options.margin,
        )
        qr.add_data(qris_string)
        qr.make(fit=True)

        img = qr.make_image(
            fill_color=options.dark,
            back_color=options.light,
        ).get_image().convert("RGB")
        img = img.resize((options.width, options.width), Image.NEAREST)

        buffered = BytesIO()
        img.save(buffered, format="PNG")
        return buffered.getvalue()
    except Exception as e:
        raise OrderKuotaError(
            f"Failed to generate QR code image: {e}",
            ErrorCode.QR_GENERATION_FAILED,
        ) from e


def render_png_base64(qris_string: str, options: QrImageOptions | None = None) -> str:
    """Render a payload and return the PNG as bare base64 (no data-URL prefix)."""
    return base64.b64encode(render_png(qris_string, options)).decode("ascii")
