"""Models for the OrderKuota mobile-app API."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from orderkuota.models.history import Rupiah


class OtpResponse(BaseModel):
    """Result of the first login step."""

    status: Literal["success", "failed"] = Field(description="Outcome of the OTP request")
    message: str = Field(default="", description="Message from the API")
    email: str | None = Field(default=None, description="Where the OTP was sent (masked by the API)")


class TokenResponse(BaseModel):
    """Result of exchanging an OTP for an auth token."""

    status: Literal["success", "failed"] = Field(description="Outcome of the login")
    message: str = Field(default="", description="Message from the API")
    token: str | None = Field(default=None, description="Auth token for later calls")
    user_id: str | None = Field(default=None, description="Account id")
    name: str | None = Field(default=None, description="Account holder name")
    username: str | None = Field(default=None, description="Account username")
    balance: Rupiah = Field(default=None, description="Balance at login")


class ApiSection(BaseModel):
    """One named section of a /get response, e.g. "account" or "qris_history"."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    message: str | None = None
    results: Any = None


class AppResponse(BaseModel):
    """Envelope returned by /get; named sections arrive as extra keys."""

    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: str | None = None

    def section(self, name: str) -> ApiSection | None:
        raw = (self.model_extra or {}).get(name)
        if not isinstance(raw, dict):
            return None
        return ApiSection.model_validate(raw)


class AppQrisTransaction(BaseModel):
    """A line of QRIS history as the app reports it."""

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    debet: Rupiah = None
    kredit: Rupiah = None
    saldo_akhir: Rupiah = None
    keterangan: str | None = None
    tanggal: str | None = None
    status: str | None = None
    fee: Rupiah = None
    brand: dict[str, Any] | None = None

    @property
    def is_credit(self) -> bool:
        return bool(self.kredit) and not self.debet


class QrisHistoryResult(BaseModel):
    success: bool = Field(description="Whether the history section succeeded")
    message: str | None = None
    page: int | None = None
    pages: int | None = None
    results: list[AppQrisTransaction] = Field(default_factory=list)


class QrisAjaibResult(BaseModel):
    """Server-generated dynamic QRIS."""

    success: bool = Field(description="Whether the qris_ajaib section succeeded")
    message: str | None = None
    qr_string: str | None = Field(default=None, description="Dynamic QRIS payload")
    amount: Rupiah = None
    results: dict[str, Any] = Field(default_factory=dict)
