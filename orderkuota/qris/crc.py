"""CRC16-CCITT checksum used by QRIS tag 63."""

from orderkuota.errors import ErrorCode, OrderKuotaError

POLYNOMIAL = 0x1021
INITIAL_VALUE = 0xFFFF


def crc16_ccitt(data: str) -> int:
    """Calculate CRC-16-CCITT (poly 0x1021, init 0xFFFF, no final XOR)."""
    if not data:
        raise OrderKuotaError(
            "String cannot be empty for CRC16 calculation",
            ErrorCode.CRC_CALCULATION_FAILED,
        )
    try:
        payload = data.encode("ascii")
    except UnicodeEncodeError as e:
        raise OrderKuotaError(
            f"Failed to calculate CRC16: non-ASCII character at position {e.start}",
            ErrorCode.CRC_CALCULATION_FAILED,
        ) from e

    crc = INITIAL_VALUE
    for byte in payload:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ POLYNOMIAL
            else:
                crc <<= 1
        crc &= 0xFFFF
    return crc


def checksum(data: str) -> str:
    """Return the CRC as the 4 uppercase hex digits QRIS expects."""
    return format(crc16_ccitt(data), "04X")
