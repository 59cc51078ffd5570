"""Pydantic domain models for TicketSplit."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

TradingPair = Literal["USDT/BRL", "USDT/TRX"]

TRADING_PAIRS: tuple[str, ...] = ("USDT/BRL", "USDT/TRX")

# ============================================================================
# Ticket Models
# ============================================================================


class Ticket(BaseModel):
    """A split order: the transfer parts plus the links attached to each one."""

    id: int
    created_at: datetime = Field(default_factory=datetime.now)
    amounts: list[Decimal]
    links: list[str] = Field(default_factory=list)
    receipt_links: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _pad_links(self) -> "Ticket":
        """Keep one transfer link and one receipt link slot per part."""
        size = len(self.amounts)
        self.links = (self.links + [""] * size)[:size]
        self.receipt_links = (self.receipt_links + [""] * size)[:size]
        return self

    @property
    def total(self) -> Decimal:
        """Sum of all parts."""
        return sum(self.amounts, Decimal("0.00"))


# ============================================================================
# Operation Models
# ============================================================================


class OperationDraft(BaseModel):
    """A trading operation as entered by the operator, before derivation."""

    ticket_id: int
    pair: TradingPair = "USDT/BRL"
    order_number: str
    quantity: Decimal
    price: Decimal
    fee: Decimal = Decimal("0")
    trade_date: date = Field(default_factory=date.today)


class Operation(OperationDraft):
    """A logged trade with its derived BRL total and effective rate."""

    id: str
    total_brl: Decimal
    final_rate: Decimal


class OperationTotals(BaseModel):
    """Footer figures for a selection of operations."""

    count: int = 0
    sum_quantity: Decimal = Decimal("0")
    avg_price: Decimal = Decimal("0")
    sum_fee: Decimal = Decimal("0")
    sum_total_brl: Decimal = Decimal("0")
    avg_final_rate: Decimal = Decimal("0")
