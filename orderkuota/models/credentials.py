"""Credential holder shared by both clients."""

from pydantic import BaseModel, Field

from orderkuota.config import Settings, settings as default_settings
from orderkuota.errors import ErrorCode, OrderKuotaError

SECRET_FIELDS = ("password", "pin", "apikey", "auth_token")


class OrderKuotaCredentials(BaseModel):
    """Account credentials; which fields are required depends on the client."""

    username: str = Field(default="", description="Account username")
    password: str = Field(default="", description="Account password")
    userid: str = Field(default="", description="OkeConnect member id")
    apikey: str = Field(default="", description="OkeConnect mutasi API key")
    pin: str = Field(default="", description="H2H PIN")
    base_qr_string: str | None = Field(
        default=None, description="Static QRIS payload for local dynamic QRIS"
    )
    auth_token: str | None = Field(default=None, description="App API token")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OrderKuotaCredentials":
        """Build credentials from environment-backed settings."""
        s = settings or default_settings
        return cls(
            username=s.username,
            password=s.password,
            userid=s.userid,
            apikey=s.apikey,
            pin=s.pin,
            base_qr_string=s.base_qr_string or None,
            auth_token=s.auth_token or None,
        )

    def missing(self, *fields: str) -> list[str]:
        """Names of the given fields that are empty."""
        return [name for name in fields if not (getattr(self, name) or "").strip()]

    def require(self, *fields: str) -> None:
        """Raise MISSING_CONFIG unless every named field is set."""
        missing = self.missing(*fields)
        if missing:
            raise OrderKuotaError(
                "Missing required configuration. All fields "
                f"({', '.join(fields)}) are required; missing: {', '.join(missing)}.",
                ErrorCode.MISSING_CONFIG,
            )

    def secrets(self) -> list[str]:
        """Values that must be masked wherever they could be logged."""
        return [v for v in (getattr(self, name) for name in SECRET_FIELDS) if v]
