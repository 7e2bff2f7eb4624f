"""Configuration module using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpConfig(BaseModel):
    # Transport
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    user_agent: str = Field(default="okhttp/4.12.0", description="User-Agent header")

    # Resilience Settings
    max_retries: int = Field(
        default=3, description="Maximum attempts for requests that fail in transport"
    )
    retry_backoff_base: float = Field(
        default=2.0, description="Base for exponential backoff"
    )
    rate_limit_rpm: int = Field(
        default=0, description="Requests per minute; 0 disables rate limiting"
    )


class AppIdentity(BaseModel):
    """Device fields the mobile-app API expects on every form post."""

    app_reg_id: str = Field(
        default="di309HvATsaiCppl5eDpoc:APA91bFUcTOH8h2XHdPRz2qQ5Bezn-3_TaycFcJ5pNLGWpmaxheQP9Ri0E56wLHz0_b1vcss55jbRQXZgc9loSfBdNa5nZJZVMlk7GS1JDMGyFUVvpcwXbMDg8tjKGZAurCGR4kDMDRJ",
        description="Firebase registration id of the app install",
    )
    app_version_code: str = Field(default="250327", description="App version code")
    app_version_name: str = Field(default="25.03.27", description="App version name")
    phone_model: str = Field(default="SM-G960N", description="Reported phone model")
    phone_uuid: str = Field(default="di309HvATsaiCppl5eDpoc", description="Reported phone uuid")
    phone_android_version: str = Field(default="9", description="Reported Android version")


class QrImageConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Display Settings
    width: int = Field(default=512, description="Rendered image width in pixels")
    margin: int = Field(default=4, description="Quiet zone in modules")
    dark: str = Field(default="#000000", description="Module colour")
    light: str = Field(default="#FFFFFF", description="Background colour")


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="ORDERKUOTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Credentials
    username: str = Field(default="", description="OrderKuota account username")
    password: str = Field(default="", description="OrderKuota account password")
    userid: str = Field(default="", description="OkeConnect member id")
    apikey: str = Field(default="", description="OkeConnect mutasi API key")
    pin: str = Field(default="", description="H2H transaction PIN")
    base_qr_string: str = Field(
        default="", description="Static merchant QRIS payload used for dynamic QRIS"
    )
    auth_token: str = Field(default="", description="Cached app API token")

    # Endpoints
    h2h_base_url: str = Field(
        default="https://h2h.okeconnect.com", description="H2H balance endpoint base"
    )
    gateway_base_url: str = Field(
        default="https://gateway.okeconnect.com", description="Mutasi endpoint base"
    )
    app_base_url: str = Field(
        default="https://app.orderkuota.com/api/v2", description="Mobile-app API base"
    )

    http: HttpConfig = HttpConfig()

    app_identity: AppIdentity = AppIdentity()

    qr_image: QrImageConfig = QrImageConfig()

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    audit_log_dir: Path | None = Field(
        default=None, description="Directory for JSONL request audit logs"
    )
    mask_with_presidio: bool = Field(
        default=False, description="Run Presidio NLP masking on logged free text"
    )


# Global settings instance
settings = Settings()
