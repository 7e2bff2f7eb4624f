"""Balance models."""

from decimal import Decimal

from pydantic import BaseModel, Field

from orderkuota.utils.money import format_rupiah


class BalanceResponse(BaseModel):
    """H2H balance check result."""

    status: bool = Field(description="Whether the balance check succeeded")
    message: str = Field(description="Raw message returned by the gateway")
    balance: Decimal = Field(default=Decimal(0), description="Parsed balance in IDR")

    def to_display_dict(self) -> dict:
        return {
            "status": self.status,
            "balance": format_rupiah(self.balance),
            "message": self.message,
        }


class AppBalanceResponse(BaseModel):
    """Balance as reported by the mobile-app account menu."""

    success: bool = Field(description="Whether the account section succeeded")
    message: str | None = Field(default=None, description="API message on failure")
    balance: Decimal | None = Field(default=None, description="Main balance in IDR")
    qris_balance: Decimal | None = Field(default=None, description="QRIS settlement balance in IDR")
