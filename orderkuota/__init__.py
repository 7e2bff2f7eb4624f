"""Python client for the OrderKuota / OkeConnect payment gateway."""

from .errors import ErrorCode, OrderKuotaError
from .models import OrderKuotaCredentials
from .clients import GatewayClient, AppClient
from .qris import inject_amount, extract_amount, verify_checksum, QrisPayload, QrImageOptions

# The gateway client is what most callers mean by "the OrderKuota client"
OrderKuota = GatewayClient

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "OrderKuotaError",
    "OrderKuotaCredentials",
    "GatewayClient",
    "AppClient",
    "OrderKuota",
    "inject_amount",
    "extract_amount",
    "verify_checksum",
    "QrisPayload",
    "QrImageOptions",
]
