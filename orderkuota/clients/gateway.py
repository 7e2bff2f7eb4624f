"""OkeConnect H2H balance, mutasi history and local dynamic QRIS."""

from decimal import Decimal
from typing import Any
from urllib.parse import quote, urlencode

from orderkuota.clients.base import BaseClient, translate_errors
from orderkuota.config import QrImageConfig
from orderkuota.errors import ErrorCode, OrderKuotaError
from orderkuota.models.balance import BalanceResponse
from orderkuota.models.history import (
    MutasiResponse,
    QrisHistoryResponse,
    RetailHistoryResponse,
    VirtualAccountHistoryResponse,
)
from orderkuota.qris.image import render_png_base64
from orderkuota.qris.payload import COUNTRY_CODE_ID, inject_amount
from orderkuota.utils.money import parse_rupiah
from orderkuota.utils.pii import SECRET_MASK

# Plain-text balance replies containing any of these are failures
ERROR_MARKERS = ("error", "failed", "invalid", "unauthorized", "access denied")


class GatewayClient(BaseClient):
    """Client for the OkeConnect H2H and mutasi endpoints.

    Example:
        client = GatewayClient(
            username="user", password="pass", userid="OK123",
            apikey="key", pin="1234", base_qr_string="000201...",
        )
        balance = client.check_balance()
        qris = client.generate_qris_string(50000)
    """

    client_name = "gateway"
    required_fields = ("username", "password", "userid", "apikey", "pin")

    def _balance_url(self, reveal: bool = True) -> str:
        c = self._credentials
        query = urlencode({
            "memberID": c.userid,
            "pin": c.pin if reveal else SECRET_MASK,
            "password": c.password if reveal else SECRET_MASK,
        }, safe="*")
        return f"{self.settings.h2h_base_url}/trx/balance?{query}"

    def _mutasi_url(self, kind: str, reveal: bool = True) -> str:
        c = self._credentials
        apikey = quote(c.apikey, safe="") if reveal else SECRET_MASK
        return f"{self.settings.gateway_base_url}/api/mutasi/{kind}/{quote(c.userid, safe='')}/{apikey}"

    @translate_errors(ErrorCode.UNKNOWN_ERROR, "check balance")
    def check_balance(self) -> BalanceResponse:
        """Check the H2H account balance.

        The endpoint usually answers in plain text such as "Saldo Rp 1.234.567";
        a JSON object with status/message/balance is accepted as well.

        Raises:
            OrderKuotaError: EMPTY_RESPONSE, API_ERROR, BALANCE_CHECK_FAILED,
                INVALID_RESPONSE or NETWORK_ERROR
        """
        response = self._request("GET", self._balance_url())
        body = (response.text or "").strip()

        if body.startswith(("{", "[")):
            payload = self._json(response)
            if not isinstance(payload, dict):
                raise OrderKuotaError(
                    "Invalid response format from balance API",
                    ErrorCode.INVALID_RESPONSE,
                    response.status_code,
                )
            return self._balance_from_json(payload)

        return self._balance_from_text(body)

    def _balance_from_text(self, body: str) -> BalanceResponse:
        if not body:
            raise OrderKuotaError("Empty response from balance API", ErrorCode.EMPTY_RESPONSE)

        lowered = body.lower()
        if any(marker in lowered for marker in ERROR_MARKERS):
            raise OrderKuotaError(f"API Error: {self._mask(body)}", ErrorCode.API_ERROR)

        balance = parse_rupiah(body, dot_decimals=False)
        if balance is None:
            self.logger.warning(f"Could not parse balance from response: {self._mask(body)}")
            balance = Decimal(0)

        return BalanceResponse(status=True, message=body, balance=balance)

    def _balance_from_json(self, payload: dict[str, Any]) -> BalanceResponse:
        if not payload.get("status"):
            raise OrderKuotaError(
                payload.get("message") or "Balance check failed",
                ErrorCode.BALANCE_CHECK_FAILED,
            )
        return BalanceResponse(
            status=True,
            message=payload.get("message") or "Success",
            balance=parse_rupiah(payload.get("balance")) or Decimal(0),
        )

    def _fetch_mutasi(self, kind: str, model: type[MutasiResponse], code: ErrorCode, label: str):
        response = self._request(
            "GET",
            self._mutasi_url(kind),
            error_code=code,
            error_prefix=f"Failed to fetch {label} history",
        )
        history = self._validate(model, self._json(response))
        if not history.ok:
            self.logger.warning(f"{label} history reported failure: {history.message}")
        else:
            self.logger.info(f"Fetched {len(history.data)} {label} transactions")
        return history

    @translate_errors(ErrorCode.QRIS_FETCH_FAILED, "fetch QRIS history")
    def fetch_qris_history(self) -> QrisHistoryResponse:
        """Fetch incoming QRIS payments."""
        return self._fetch_mutasi("qris", QrisHistoryResponse, ErrorCode.QRIS_FETCH_FAILED, "QRIS")

    @translate_errors(ErrorCode.VA_FETCH_FAILED, "fetch Virtual Account history")
    def fetch_virtual_account_history(self) -> VirtualAccountHistoryResponse:
        """Fetch incoming virtual-account transfers."""
        return self._fetch_mutasi(
            "va", VirtualAccountHistoryResponse, ErrorCode.VA_FETCH_FAILED, "Virtual Account"
        )

    @translate_errors(ErrorCode.RETAIL_FETCH_FAILED, "fetch retail history")
    def fetch_retail_history(self) -> RetailHistoryResponse:
        """Fetch retail product sales."""
        return self._fetch_mutasi("retail", RetailHistoryResponse, ErrorCode.RETAIL_FETCH_FAILED, "retail")

    @translate_errors(ErrorCode.QRIS_GENERATION_FAILED, "generate QRIS string")
    def generate_qris_string(self, amount: int | float | Decimal) -> str:
        """Build a dynamic QRIS payload for the amount from the configured static one.

        Raises:
            OrderKuotaError: INVALID_AMOUNT, MISSING_BASE_QR_STRING,
                INVALID_QRIS_FORMAT or QRIS_GENERATION_FAILED
        """
        qris = inject_amount(self._credentials.base_qr_string or "", amount)
        if self._audit:
            self._audit.log_qris_generated(int(amount), qris[-4:])
        self.logger.debug(f"Generated dynamic QRIS with checksum {qris[-4:]}")
        return qris

    @translate_errors(ErrorCode.QR_GENERATION_FAILED, "generate QR code image")
    def generate_qris_image(self, qris_string: str, options: QrImageConfig | dict | None = None) -> str:
        """Render a QRIS payload to a base64 PNG (no data-URL prefix)."""
        return render_png_base64(qris_string, self._image_options(options))

    @translate_errors(ErrorCode.QR_GENERATION_FAILED, "generate QRIS QR code")
    def generate_qris_qr_code(
        self,
        amount: int | float | Decimal,
        options: QrImageConfig | dict | None = None,
    ) -> str:
        """generate_qris_string followed by generate_qris_image."""
        return self.generate_qris_image(self.generate_qris_string(amount), options)

    def get_config(self) -> dict[str, str]:
        """Current configuration without sensitive data."""
        return {
            "username": self._credentials.username,
            "userid": self._credentials.userid,
        }

    def is_config_valid(self) -> bool:
        """True if every field needed for API calls is present.

        base_qr_string is only needed for QRIS generation and is not checked.
        """
        return not self._credentials.missing(*self.required_fields)

    def is_qris_generation_available(self) -> bool:
        base = self._credentials.base_qr_string
        return bool(base and COUNTRY_CODE_ID in base)

    def get_available_methods(self) -> dict[str, str]:
        return {
            "check_balance": "Check current account balance",
            "fetch_qris_history": "Fetch QRIS transaction history",
            "fetch_virtual_account_history": "Fetch Virtual Account transaction history",
            "fetch_retail_history": "Fetch retail transaction history",
            "generate_qris_string": "Generate QRIS payment string with specified amount",
            "generate_qris_image": "Generate QR code image from QRIS string and return as base64",
            "generate_qris_qr_code": "Generate complete QRIS QR code image with specified amount",
            "get_config": "Get current configuration (without sensitive data)",
            "is_config_valid": "Validate if configuration is complete for basic operations",
            "is_qris_generation_available": "Check if QRIS generation is available",
            "get_available_methods": "Get list of available methods",
            "get_endpoints": "Get API endpoint URLs for debugging",
        }

    def get_endpoints(self, reveal: bool = False) -> dict[str, str]:
        """API endpoint URLs for debugging; secrets are masked unless reveal=True."""
        return {
            "balance": self._balance_url(reveal),
            "qris_history": self._mutasi_url("qris", reveal),
            "va_history": self._mutasi_url("va", reveal),
            "retail_history": self._mutasi_url("retail", reveal),
        }

