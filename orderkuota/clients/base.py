"""HTTP plumbing shared by the gateway and app clients."""

import functools
import time
from typing import Any, Callable, TypeVar, ParamSpec
from urllib.parse import quote, quote_plus

import requests
from pydantic import BaseModel, ValidationError

from orderkuota.config import Settings, QrImageConfig, settings as default_settings
from orderkuota.errors import ErrorCode, OrderKuotaError
from orderkuota.models.credentials import OrderKuotaCredentials
from orderkuota.utils.logging import AuditLogger, get_logger
from orderkuota.utils.pii import mask_secrets
from orderkuota.utils.resilience import RateLimiter, RetryError, with_retry

P = ParamSpec("P")
T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def translate_errors(code: ErrorCode, action: str) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Let OrderKuotaError through and wrap anything else with the given code."""
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except OrderKuotaError:
                raise
            except Exception as e:
                raise OrderKuotaError(f"Failed to {action}: {e}", code) from e
        return wrapper
    return decorator


class BaseClient:
    """Credential validation, a pooled session, retries and audit logging."""

    client_name = "base"
    required_fields: tuple[str, ...] = ()

    def __init__(
        self,
        credentials: OrderKuotaCredentials | dict | None = None,
        *,
        settings: Settings | None = None,
        session: requests.Session | None = None,
        **overrides: Any,
    ):
        self.settings = settings or default_settings

        if credentials is None:
            credentials = OrderKuotaCredentials.from_settings(self.settings)
        elif isinstance(credentials, dict):
            credentials = OrderKuotaCredentials(**credentials)
        if overrides:
            credentials = OrderKuotaCredentials(**{**credentials.model_dump(), **overrides})
        credentials.require(*self.required_fields)
        self._credentials = credentials

        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.settings.http.user_agent})

        self.logger = get_logger(f"orderkuota.{self.client_name}", self.settings.log_level)

        http = self.settings.http
        self._rate_limiter = RateLimiter(http.rate_limit_rpm) if http.rate_limit_rpm > 0 else None
        self._audit = (
            AuditLogger(self.settings.audit_log_dir, self._secrets(), client=self.client_name)
            if self.settings.audit_log_dir
            else None
        )
        self._send = with_retry(
            max_attempts=http.max_retries,
            backoff_base=http.retry_backoff_base,
            exceptions=(requests.ConnectionError, requests.Timeout),
        )(self._send_once)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the underlying session if this client created it."""
        if self._owns_session:
            self._session.close()

    def _secrets(self) -> list[str]:
        secrets = self._credentials.secrets()
        # URLs carry the URL-encoded form of each secret
        return secrets + [quote_plus(s) for s in secrets] + [quote(s, safe="") for s in secrets]

    def _mask(self, text: str) -> str:
        return mask_secrets(text, self._secrets())

    def _send_once(self, method: str, url: str, data: dict | None) -> requests.Response:
        if self._rate_limiter:
            self._rate_limiter.acquire()
        return self._session.request(
            method,
            url,
            data=data,
            timeout=self.settings.http.timeout,
        )

    @staticmethod
    def _error_detail(response: requests.Response | None) -> str | None:
        if response is None:
            return None
        try:
            payload = response.json()
        except ValueError:
            text = (response.text or "").strip()
            return text[:200] or None
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return None

    def _audit_request(self, method, url, status, started, data, error=None):
        if self._audit:
            self._audit.log_request(
                method,
                self._mask(url),
                status,
                (time.monotonic() - started) * 1000,
                form=data,
                error=error,
            )

    def _request(
        self,
        method: str,
        url: str,
        *,
        data: dict | None = None,
        error_code: ErrorCode = ErrorCode.NETWORK_ERROR,
        error_prefix: str = "Network error",
    ) -> requests.Response:
        """Send one request and map every transport or HTTP failure to error_code."""
        started = time.monotonic()
        try:
            response = self._send(method, url, data)
            response.raise_for_status()
        except RetryError as e:
            detail = self._mask(str(e.__cause__ or e))
            self._audit_request(method, url, None, started, data, error=detail)
            raise OrderKuotaError(f"{error_prefix}: {detail}", error_code) from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            detail = self._mask(self._error_detail(e.response) or str(e))
            self._audit_request(method, url, status, started, data, error=detail)
            raise OrderKuotaError(f"{error_prefix}: {detail}", error_code, status) from e
        except requests.RequestException as e:
            detail = self._mask(str(e))
            self._audit_request(method, url, None, started, data, error=detail)
            raise OrderKuotaError(f"{error_prefix}: {detail}", error_code) from e

        self._audit_request(method, url, response.status_code, started, data)
        self.logger.debug(f"{method} {self._mask(url)} -> {response.status_code}")
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise OrderKuotaError(
                "Invalid response format: body is not JSON",
                ErrorCode.INVALID_RESPONSE,
                response.status_code,
            ) from e

    @staticmethod
    def _validate(model: type[M], payload: Any) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise OrderKuotaError(
                f"Invalid response format: {e.error_count()} field error(s) in {model.__name__}",
                ErrorCode.INVALID_RESPONSE,
            ) from e

    def _image_options(self, options: QrImageConfig | dict | None) -> QrImageConfig:
        """Merge per-call image options over the configured defaults."""
        if options is None:
            return self.settings.qr_image
        if isinstance(options, QrImageConfig):
            return options
        merged = {**self.settings.qr_image.model_dump(), **options}
        # {"color": {"dark": ..., "light": ...}} is accepted as well
        color = merged.pop("color", None)
        if isinstance(color, dict):
            merged.update(color)
        elif color is not None:
            merged["color"] = color
        try:
            return QrImageConfig(**merged)
        except ValidationError as e:
            raise OrderKuotaError(
                f"Invalid QR image options: {e.error_count()} field error(s)",
                ErrorCode.QR_GENERATION_FAILED,
            ) from e
