"""QRIS tag-length-value parsing and dynamic amount injection."""

import math
from decimal import Decimal, InvalidOperation
from typing import NamedTuple

from pydantic import BaseModel, Field

from orderkuota.errors import ErrorCode, OrderKuotaError
from orderkuota.qris.crc import checksum

TAG_POINT_OF_INITIATION = "01"
TAG_MERCHANT_ACCOUNT = "26"
TAG_MERCHANT_ACCOUNT_QRIS = "51"
TAG_MERCHANT_CATEGORY = "52"
TAG_CURRENCY = "53"
TAG_AMOUNT = "54"
TAG_COUNTRY_CODE = "58"
TAG_MERCHANT_NAME = "59"
TAG_MERCHANT_CITY = "60"
TAG_POSTAL_CODE = "61"
TAG_CRC = "63"

STATIC_INITIATION = "010211"
DYNAMIC_INITIATION = "010212"
COUNTRY_CODE_ID = "5802ID"
CRC_HEADER = "6304"

# EMV caps tag 54 at 13 characters
MAX_AMOUNT_DIGITS = 13


class TlvField(NamedTuple):
    """One tag-length-value element."""
    tag: str
    length: int
    value: str

    def encode(self) -> str:
        return f"{self.tag}{len(self.value):02d}{self.value}"


def parse_tlv(payload: str) -> list[TlvField]:
    """Split a QRIS payload into its top-level TLV fields.

    Raises:
        OrderKuotaError: INVALID_QRIS_FORMAT when a header is not two
            2-digit numbers or a value runs past the end of the payload
    """
    fields: list[TlvField] = []
    pos = 0

    while pos < len(payload):
        header = payload[pos:pos + 4]
        if len(header) < 4 or not (header.isascii() and header.isdigit()):
            raise OrderKuotaError(
                f"Invalid QRIS format: malformed tag header at position {pos}",
                ErrorCode.INVALID_QRIS_FORMAT,
            )

        tag, length = header[:2], int(header[2:])
        end = pos + 4 + length
        if end > len(payload):
            raise OrderKuotaError(
                f"Invalid QRIS format: tag {tag} overruns payload",
                ErrorCode.INVALID_QRIS_FORMAT,
            )

        fields.append(TlvField(tag, length, payload[pos + 4:end]))
        pos = end

    return fields


def encode_tlv(fields: list[TlvField]) -> str:
    return "".join(field.encode() for field in fields)


def verify_checksum(payload: str) -> bool:
    """Check that the trailing tag 63 matches the CRC of everything before it."""
    payload = payload.strip()
    if len(payload) < 8 or payload[-8:-4] != CRC_HEADER:
        return False
    try:
        expected = checksum(payload[:-4])
    except OrderKuotaError:
        # non-ASCII content cannot carry a valid QRIS CRC
        return False
    return expected == payload[-4:].upper()


def normalize_amount(amount) -> int:
    """Validate a payment amount and floor it to whole rupiah."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise OrderKuotaError(
            "Amount must be a number",
            ErrorCode.INVALID_AMOUNT,
        )
    try:
        if not math.isfinite(amount) or amount <= 0:
            raise OrderKuotaError(
                "Amount must be greater than 0",
                ErrorCode.INVALID_AMOUNT,
            )
    except OverflowError as e:
        raise OrderKuotaError(
            f"Amount exceeds {MAX_AMOUNT_DIGITS} digits",
            ErrorCode.INVALID_AMOUNT,
        ) from e
    except (InvalidOperation, ValueError) as e:
        raise OrderKuotaError("Amount must be a number", ErrorCode.INVALID_AMOUNT) from e

    final_amount = math.floor(amount)
    if final_amount < 1:
        raise OrderKuotaError(
            "Amount must be at least 1 after removing decimals",
            ErrorCode.INVALID_AMOUNT,
        )
    if len(str(final_amount)) > MAX_AMOUNT_DIGITS:
        raise OrderKuotaError(
            f"Amount exceeds {MAX_AMOUNT_DIGITS} digits",
            ErrorCode.INVALID_AMOUNT,
        )
    return final_amount


def build_amount_tag(amount: int) -> str:
    """Tag 54 segment: "54" + 2-digit length + amount."""
    value = str(amount)
    return f"{TAG_AMOUNT}{len(value):02d}{value}"


def _drop_amount_tag(body: str) -> str:
    """Remove an existing top-level tag 54 from a CRC-stripped payload.

    Payloads that do not parse cleanly are returned untouched.
    """
    if not body.endswith(CRC_HEADER):
        return body
    try:
        fields = parse_tlv(body[:-len(CRC_HEADER)])
    except OrderKuotaError:
        return body
    if not any(field.tag == TAG_AMOUNT for field in fields):
        return body
    return encode_tlv([f for f in fields if f.tag != TAG_AMOUNT]) + CRC_HEADER


def inject_amount(base_qr_string: str, amount) -> str:
    """Turn a static QRIS payload into a dynamic one for the given amount.

    The trailing checksum is dropped, point of initiation switches from
    static (010211) to dynamic (010212), the tag 54 segment is inserted
    right before the 5802ID country code and a fresh CRC16 is appended.
    """
    final_amount = normalize_amount(amount)

    if not base_qr_string or not base_qr_string.strip():
        raise OrderKuotaError(
            "Base QR string is required for QRIS generation. "
            "Please provide base_qr_string in configuration.",
            ErrorCode.MISSING_BASE_QR_STRING,
        )
    base = base_qr_string.strip()

    if COUNTRY_CODE_ID not in base:
        raise OrderKuotaError(
            f"Invalid QRIS format: missing Indonesian country code ({COUNTRY_CODE_ID})",
            ErrorCode.INVALID_QRIS_FORMAT,
        )

    qris_base = base[:-4].replace(STATIC_INITIATION, DYNAMIC_INITIATION, 1)
    qris_base = _drop_amount_tag(qris_base)

    insert_position = qris_base.find(COUNTRY_CODE_ID)
    if insert_position == -1:
        raise OrderKuotaError(
            "Invalid QRIS format: cannot find country code position",
            ErrorCode.INVALID_QRIS_FORMAT,
        )

    with_amount = (
        qris_base[:insert_position]
        + build_amount_tag(final_amount)
        + qris_base[insert_position:]
    )
    return with_amount + checksum(with_amount)


class QrisPayload(BaseModel):
    """Decoded view of a QRIS payload."""

    raw: str = Field(description="Payload as scanned")
    elements: list[TlvField] = Field(default_factory=list, description="Top-level TLV fields")

    @classmethod
    def parse(cls, payload: str) -> "QrisPayload":
        if not payload or not payload.strip():
            raise OrderKuotaError("QRIS string cannot be empty", ErrorCode.INVALID_QRIS_STRING)
        raw = payload.strip()
        return cls(raw=raw, elements=parse_tlv(raw))

    def get(self, tag: str) -> str | None:
        for field in self.elements:
            if field.tag == tag:
                return field.value
        return None

    def _subfield(self, tags: tuple[str, ...], subtag: str) -> str:
        for tag in tags:
            value = self.get(tag)
            if not value:
                continue
            try:
                for field in parse_tlv(value):
                    if field.tag == subtag:
                        return field.value
            except OrderKuotaError:
                continue
        return ""

    @property
    def amount(self) -> Decimal | None:
        value = self.get(TAG_AMOUNT)
        if value is None:
            return None
        try:
            return Decimal(value)
        except InvalidOperation:
            return None

    @property
    def is_dynamic(self) -> bool:
        return self.get(TAG_POINT_OF_INITIATION) == DYNAMIC_INITIATION[-2:]

    @property
    def merchant_name(self) -> str:
        return self.get(TAG_MERCHANT_NAME) or ""

    @property
    def merchant_city(self) -> str:
        return self.get(TAG_MERCHANT_CITY) or ""

    @property
    def country_code(self) -> str:
        return self.get(TAG_COUNTRY_CODE) or ""

    @property
    def checksum(self) -> str:
        return self.get(TAG_CRC) or ""

    @property
    def nmid(self) -> str:
        """National merchant id, sub-tag 02 of the merchant account template."""
        return self._subfield((TAG_MERCHANT_ACCOUNT_QRIS, TAG_MERCHANT_ACCOUNT), "02")

    @property
    def checksum_valid(self) -> bool:
        return verify_checksum(self.raw)

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display to users."""
        return {
            "merchant_name": self.merchant_name,
            "merchant_city": self.merchant_city,
            "nmid": self.nmid,
            "country_code": self.country_code,
            "postal_code": self.get(TAG_POSTAL_CODE) or "",
            "merchant_category": self.get(TAG_MERCHANT_CATEGORY) or "",
            "currency": self.get(TAG_CURRENCY) or "",
            "type": "dynamic" if self.is_dynamic else "static",
            "amount": str(self.amount) if self.amount is not None else None,
            "checksum": self.checksum,
            "checksum_valid": self.checksum_valid,
        }


def extract_amount(payload: str) -> Decimal | None:
    """Read tag 54 back out of a QRIS payload."""
    return QrisPayload.parse(payload).amount
