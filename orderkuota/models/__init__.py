"""Models module - Pydantic data models."""

from .credentials import OrderKuotaCredentials
from .balance import BalanceResponse, AppBalanceResponse
from .history import (
    QrisTransaction,
    VirtualAccountTransaction,
    RetailTransaction,
    QrisHistoryResponse,
    VirtualAccountHistoryResponse,
    RetailHistoryResponse,
)
from .app import (
    OtpResponse,
    TokenResponse,
    ApiSection,
    AppResponse,
    AppQrisTransaction,
    QrisHistoryResult,
    QrisAjaibResult,
)

__all__ = [
    "OrderKuotaCredentials",
    "BalanceResponse",
    "AppBalanceResponse",
    "QrisTransaction",
    "VirtualAccountTransaction",
    "RetailTransaction",
    "QrisHistoryResponse",
    "VirtualAccountHistoryResponse",
    "RetailHistoryResponse",
    "OtpResponse",
    "TokenResponse",
    "ApiSection",
    "AppResponse",
    "AppQrisTransaction",
    "QrisHistoryResult",
    "QrisAjaibResult",
]
