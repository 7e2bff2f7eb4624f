"""Error types raised by the OrderKuota clients."""

from enum import Enum


class ErrorCode(str, Enum):
    """Closed set of error codes carried by OrderKuotaError."""

    MISSING_CONFIG = "MISSING_CONFIG"
    MISSING_TOKEN = "MISSING_TOKEN"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    API_ERROR = "API_ERROR"
    BALANCE_CHECK_FAILED = "BALANCE_CHECK_FAILED"
    QRIS_FETCH_FAILED = "QRIS_FETCH_FAILED"
    VA_FETCH_FAILED = "VA_FETCH_FAILED"
    RETAIL_FETCH_FAILED = "RETAIL_FETCH_FAILED"
    OTP_REQUEST_FAILED = "OTP_REQUEST_FAILED"
    TOKEN_REQUEST_FAILED = "TOKEN_REQUEST_FAILED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    MISSING_BASE_QR_STRING = "MISSING_BASE_QR_STRING"
    INVALID_QRIS_FORMAT = "INVALID_QRIS_FORMAT"
    INVALID_QRIS_STRING = "INVALID_QRIS_STRING"
    QRIS_GENERATION_FAILED = "QRIS_GENERATION_FAILED"
    CRC_CALCULATION_FAILED = "CRC_CALCULATION_FAILED"
    QR_GENERATION_FAILED = "QR_GENERATION_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class OrderKuotaError(Exception):
    """Raised by every public client operation on failure.

    Attributes:
        code: One of ErrorCode
        status: HTTP status code when the failure came from a response
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)
        self.status = status

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"OrderKuotaError(code={self.code.value!r}, status={self.status!r}, message={self.message!r})"
