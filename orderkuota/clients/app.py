"""OrderKuota mobile-app API: OTP login, QRIS history, menu and QRIS Ajaib."""

import time
from datetime import date
from decimal import Decimal
from typing import Any

from orderkuota.clients.base import BaseClient, translate_errors
from orderkuota.config import QrImageConfig
from orderkuota.errors import ErrorCode, OrderKuotaError
from orderkuota.models.app import (
    AppQrisTransaction,
    AppResponse,
    OtpResponse,
    QrisAjaibResult,
    QrisHistoryResult,
    TokenResponse,
)
from orderkuota.models.balance import AppBalanceResponse
from orderkuota.qris.image import render_png_base64
from orderkuota.qris.payload import normalize_amount
from orderkuota.utils.money import parse_rupiah
from orderkuota.utils.pii import SECRET_MASK, mask_email, mask_pii


def _form_date(value: date | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


class AppClient(BaseClient):
    """Client for the endpoints used by the OrderKuota Android app.

    Login is two steps: request_otp() makes the API email a one-time
    code, get_token(otp) exchanges it for a token that every other call
    needs. A token obtained earlier can be passed in or set_token()'d.
    """

    client_name = "app"
    required_fields = ("username", "password")

    def __init__(self, credentials=None, *, token: str | None = None, **kwargs):
        super().__init__(credentials, **kwargs)
        self._token: str | None = token or self._credentials.auth_token or None
        if self._audit and self._token:
            self._audit.add_secret(self._token)

    def _secrets(self) -> list[str]:
        secrets = super()._secrets()
        token = getattr(self, "_token", None)
        return secrets + [token] if token else secrets

    # Token handling

    def set_token(self, token: str) -> None:
        """Use an existing auth token for subsequent calls."""
        if not token or not token.strip():
            raise OrderKuotaError("Token cannot be empty", ErrorCode.MISSING_TOKEN)
        self._token = token.strip()
        if self._audit:
            self._audit.add_secret(self._token)

    def clear_token(self) -> None:
        self._token = None

    @property
    def token(self) -> str | None:
        return self._token

    def get_token_value(self) -> str | None:
        return self._token

    def has_token(self) -> bool:
        return bool(self._token)

    def _require_token(self) -> str:
        if not self._token:
            raise OrderKuotaError(
                "Authentication token is required. Call request_otp() and get_token() first, "
                "or provide a token.",
                ErrorCode.MISSING_TOKEN,
            )
        return self._token

    # Form building

    def _login_form(self, password: str) -> dict[str, str]:
        identity = self.settings.app_identity
        return {
            "username": self._credentials.username,
            "password": password,
            "app_reg_id": identity.app_reg_id,
            "app_version_code": identity.app_version_code,
            "app_version_name": identity.app_version_name,
        }

    def _get_form(self, requests_fields: dict[str, str]) -> dict[str, str]:
        identity = self.settings.app_identity
        form = {
            "auth_username": self._credentials.username,
            "auth_token": self._require_token(),
            "app_reg_id": identity.app_reg_id,
            "app_version_code": identity.app_version_code,
            "app_version_name": identity.app_version_name,
            "phone_model": identity.phone_model,
            "phone_uuid": identity.phone_uuid,
            "phone_android_version": identity.phone_android_version,
            "request_time": str(int(time.time() * 1000)),
        }
        form.update(requests_fields)
        return form

    def _login(self, password: str, code: ErrorCode, action: str) -> dict[str, Any]:
        response = self._request(
            "POST",
            f"{self.settings.app_base_url}/login",
            data=self._login_form(password),
            error_code=code,
            error_prefix=f"Failed to {action}",
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise OrderKuotaError(
                "Invalid response format from login API",
                ErrorCode.INVALID_RESPONSE,
                response.status_code,
            )
        return payload

    def _get(self, requests_fields: dict[str, str], code: ErrorCode, action: str) -> AppResponse:
        response = self._request(
            "POST",
            f"{self.settings.app_base_url}/get",
            data=self._get_form(requests_fields),
            error_code=code,
            error_prefix=f"Failed to {action}",
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise OrderKuotaError(
                f"Invalid response format while trying to {action}",
                ErrorCode.INVALID_RESPONSE,
                response.status_code,
            )
        result = self._validate(AppResponse, payload)
        if not result.success:
            message = mask_pii(self._mask(result.message or ""), self.settings.mask_with_presidio)
            self.logger.warning(f"API refused to {action}: {message}")
        return result

    # Login

    @translate_errors(ErrorCode.OTP_REQUEST_FAILED, "request OTP")
    def request_otp(self) -> OtpResponse:
        """Ask the API to send a login OTP to the account's email."""
        payload = self._login(self._credentials.password, ErrorCode.OTP_REQUEST_FAILED, "request OTP")
        results = payload.get("results") or {}

        if not payload.get("success"):
            return OtpResponse(
                status="failed",
                message=payload.get("message") or "OTP request failed",
            )

        # Trusted devices get a token straight away
        if isinstance(results, dict) and results.get("token"):
            self.set_token(str(results["token"]))
            return OtpResponse(status="success", message="Logged in without OTP")

        email = results.get("otp_value") if isinstance(results, dict) else None
        self.logger.info(f"OTP sent to {mask_email(email or '')}")
        return OtpResponse(
            status="success",
            message=payload.get("message") or "OTP sent",
            email=email,
        )

    @translate_errors(ErrorCode.TOKEN_REQUEST_FAILED, "get token")
    def get_token(self, otp: str) -> TokenResponse:
        """Exchange an OTP for an auth token and keep it on the client."""
        if not otp or not str(otp).strip():
            raise OrderKuotaError("OTP is required", ErrorCode.TOKEN_REQUEST_FAILED)

        payload = self._login(str(otp).strip(), ErrorCode.TOKEN_REQUEST_FAILED, "get token")
        results = payload.get("results") or {}

        if not payload.get("success") or not isinstance(results, dict) or not results.get("token"):
            return TokenResponse(
                status="failed",
                message=payload.get("message") or "Login failed",
            )

        self.set_token(str(results["token"]))
        self.logger.info(f"Authenticated as {self._credentials.username}")
        return TokenResponse(
            status="success",
            message=payload.get("message") or "Login successful",
            token=self._token,
            user_id=str(results["id"]) if results.get("id") is not None else None,
            name=results.get("name"),
            username=results.get("username"),
            balance=results.get("balance"),
        )

    # Authenticated calls

    @translate_errors(ErrorCode.QRIS_FETCH_FAILED, "fetch QRIS history")
    def get_qris_history(
        self,
        history_type: str = "qris_history",
        *,
        page: int = 1,
        per_page: int | None = None,
        kind: str | None = None,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        note: str | None = None,
    ) -> QrisHistoryResult:
        """Fetch a page of QRIS history.

        Args:
            history_type: Section to request, "qris_history" for payments
            page: 1-based page number
            per_page: Rows per page (jumlah)
            kind: Filter on transaction kind (jenis), e.g. "kredit"
            date_from: Start date (dari_tanggal)
            date_to: End date (ke_tanggal)
            note: Filter on the description (keterangan)
        """
        prefix = f"requests[{history_type}]"
        fields = {f"{prefix}[page]": str(page)}
        optional = {
            "jumlah": str(per_page) if per_page is not None else None,
            "jenis": kind,
            "dari_tanggal": _form_date(date_from),
            "ke_tanggal": _form_date(date_to),
            "keterangan": note,
        }
        fields.update({f"{prefix}[{k}]": v for k, v in optional.items() if v is not None})

        response = self._get(fields, ErrorCode.QRIS_FETCH_FAILED, "fetch QRIS history")
        section = response.section(history_type)
        if section is None:
            return QrisHistoryResult(
                success=False,
                message=response.message or f"No {history_type} section in response",
            )

        rows = section.results if isinstance(section.results, list) else []
        extra = section.model_extra or {}
        return QrisHistoryResult(
            success=section.success,
            message=section.message,
            page=extra.get("page", page),
            pages=extra.get("pages"),
            results=[AppQrisTransaction.model_validate(row) for row in rows if isinstance(row, dict)],
        )

    def _menu(self, code: ErrorCode, action: str) -> AppResponse:
        return self._get(
            {"requests[0]": "account", "requests[1]": "qris_menu"},
            code,
            action,
        )

    @translate_errors(ErrorCode.QRIS_FETCH_FAILED, "fetch QRIS menu")
    def fetch_qris_menu(self) -> AppResponse:
        """Fetch the account and qris_menu sections."""
        return self._menu(ErrorCode.QRIS_FETCH_FAILED, "fetch QRIS menu")

    @translate_errors(ErrorCode.BALANCE_CHECK_FAILED, "check balance")
    def check_balance(self) -> AppBalanceResponse:
        """Balance and QRIS balance read from the account menu."""
        menu = self._menu(ErrorCode.BALANCE_CHECK_FAILED, "check balance")
        account = menu.section("account")
        if account is None or not account.success:
            return AppBalanceResponse(
                success=False,
                message=(account.message if account else None) or menu.message or "Account data unavailable",
            )

        results = account.results if isinstance(account.results, dict) else {}
        qris_balance = parse_rupiah(results.get("qris_balance"))
        if qris_balance is None:
            qris_menu = menu.section("qris_menu")
            if qris_menu and isinstance(qris_menu.results, dict):
                qris_balance = parse_rupiah(qris_menu.results.get("qris_balance"))

        return AppBalanceResponse(
            success=True,
            balance=parse_rupiah(results.get("balance")),
            qris_balance=qris_balance,
        )

    @translate_errors(ErrorCode.QRIS_GENERATION_FAILED, "generate QRIS Ajaib")
    def generate_qris_ajaib(self, amount: int | float | Decimal) -> QrisAjaibResult:
        """Ask the server for a dynamic QRIS for the amount."""
        final_amount = normalize_amount(amount)
        response = self._get(
            {"requests[qris_ajaib][desired_nominal]": str(final_amount)},
            ErrorCode.QRIS_GENERATION_FAILED,
            "generate QRIS Ajaib",
        )
        section = response.section("qris_ajaib")
        if section is None:
            return QrisAjaibResult(
                success=False,
                message=response.message or "No qris_ajaib section in response",
            )

        results = section.results if isinstance(section.results, dict) else {}
        return QrisAjaibResult(
            success=section.success and bool(results.get("qr_string")),
            message=section.message,
            qr_string=results.get("qr_string"),
            amount=results.get("amount", final_amount),
            results=results,
        )

    @translate_errors(ErrorCode.QR_GENERATION_FAILED, "generate QR code image")
    def generate_qr_image(self, qris_string: str, options: QrImageConfig | dict | None = None) -> str:
        """Render a QRIS payload to a base64 PNG (no data-URL prefix)."""
        return render_png_base64(qris_string, self._image_options(options))

    def get_config(self) -> dict[str, str | None]:
        """Username and a masked token; never the password."""
        return {
            "username": self._credentials.username,
            "token": f"{self._token[:4]}{SECRET_MASK}" if self._token else None,
        }

    def is_config_valid(self) -> bool:
        return not self._credentials.missing(*self.required_fields)
