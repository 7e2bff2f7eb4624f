"""QRIS module - CRC16, TLV payload handling and QR rendering."""

from .crc import crc16_ccitt, checksum
from .payload import (
    TlvField,
    QrisPayload,
    parse_tlv,
    encode_tlv,
    inject_amount,
    extract_amount,
    verify_checksum,
    normalize_amount,
    build_amount_tag,
)
from .image import QrImageOptions, render_png, render_png_base64

__all__ = [
    "crc16_ccitt",
    "checksum",
    "TlvField",
    "QrisPayload",
    "parse_tlv",
    "encode_tlv",
    "inject_amount",
    "extract_amount",
    "verify_checksum",
    "normalize_amount",
    "build_amount_tag",
    "QrImageOptions",
    "render_png",
    "render_png_base64",
]
