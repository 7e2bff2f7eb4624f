"""Mutasi (transaction history) models for the OkeConnect gateway."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from orderkuota.utils.money import parse_rupiah

Rupiah = Annotated[Decimal | None, BeforeValidator(parse_rupiah)]


def _as_list(value: Any) -> Any:
    # The gateway sends null or {} instead of [] for an empty statement
    if value is None or value == {} or value == "":
        return []
    return value


class MutasiTransaction(BaseModel):
    """Fields shared by every statement line."""

    model_config = ConfigDict(extra="allow")

    date: str | None = Field(default=None, description="Timestamp as sent by the gateway")
    amount: Rupiah = Field(default=None, description="Transaction amount")
    type: str | None = Field(default=None, description="CR for credit, DB for debit")
    status: str | None = Field(default=None, description="Transaction status")

    @property
    def is_credit(self) -> bool:
        return (self.type or "").upper() == "CR"


class QrisTransaction(MutasiTransaction):
    """A QRIS payment received."""

    qris: str | None = Field(default=None, description="static or dynamic")
    brand_name: str | None = Field(default=None, description="Payer's wallet or bank")
    issuer_reff: str | None = Field(default=None, description="Issuer reference")
    buyer_reff: str | None = Field(default=None, description="Payer reference or name")
    balance: Rupiah = Field(default=None, description="Balance after the transaction")


class VirtualAccountTransaction(MutasiTransaction):
    """A virtual-account transfer received."""

    bank_code: str | None = Field(default=None, description="Bank code")
    va_number: str | None = Field(default=None, description="Virtual account number")
    keterangan: str | None = Field(default=None, description="Transfer note")


class RetailTransaction(MutasiTransaction):
    """A retail product sale (pulsa, data, tokens)."""

    product_code: str | None = Field(default=None, description="Product code")
    target: str | None = Field(default=None, description="Destination number")
    sn: str | None = Field(default=None, description="Serial number from the biller")


class MutasiResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str | bool = Field(default="", description="success/failed or a boolean")
    message: str | None = Field(default=None, description="Gateway message")

    @property
    def ok(self) -> bool:
        if isinstance(self.status, bool):
            return self.status
        return self.status.lower() in ("success", "true", "ok")


class QrisHistoryResponse(MutasiResponse):
    data: Annotated[list[QrisTransaction], BeforeValidator(_as_list)] = Field(default_factory=list)


class VirtualAccountHistoryResponse(MutasiResponse):
    data: Annotated[list[VirtualAccountTransaction], BeforeValidator(_as_list)] = Field(default_factory=list)


class RetailHistoryResponse(MutasiResponse):
    data: Annotated[list[RetailTransaction], BeforeValidator(_as_list)] = Field(default_factory=list)
