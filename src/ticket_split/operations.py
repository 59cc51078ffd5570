"""Derived figures, validation and totals for logged trading operations."""

import uuid
from collections.abc import Iterable
from decimal import Decimal

from .exceptions import OperationValidationError
from .models import Operation, OperationDraft, OperationTotals, TradingPair

MAX_OPERATION_VALUE = Decimal("1000000000000")


def compute_total_brl(quantity: Decimal, price: Decimal) -> Decimal:
    """BRL value of the trade before fees."""
    return quantity * price


def compute_final_rate(quantity: Decimal, price: Decimal, fee: Decimal) -> Decimal:
    """
    Effective rate of the trade once the fee is included.

    Falls back to the quoted price when the quantity is zero.
    """
    if quantity > 0:
        return (compute_total_brl(quantity, price) + fee) / quantity
    return price


def validate_draft(draft: OperationDraft) -> None:
    """
    Check an operation draft before it is logged.

    Raises:
        OperationValidationError: If quantity or price is not positive, the fee
            is negative, any of them exceeds MAX_OPERATION_VALUE, or the order
            number is blank
    """
    if draft.quantity <= 0 or draft.price <= 0 or draft.fee < 0:
        raise OperationValidationError(
            "Quantity and price must be positive numbers; the fee may be zero "
            f"but not negative (got quantity={draft.quantity}, "
            f"price={draft.price}, fee={draft.fee})"
        )
    for name in ("quantity", "price", "fee"):
        if getattr(draft, name) > MAX_OPERATION_VALUE:
            raise OperationValidationError(
                f"{name.capitalize()} {getattr(draft, name)} exceeds the maximum "
                f"of {MAX_OPERATION_VALUE:,}"
            )
    if not draft.order_number.strip():
        raise OperationValidationError("The order number cannot be empty")


def build_operation(
    draft: OperationDraft, operation_id: str | None = None
) -> Operation:
    """
    Turn a validated draft into an Operation with its derived fields.

    Args:
        draft: The operator's input
        operation_id: Explicit id; a random UUID is generated when omitted

    Returns:
        The complete operation
    """
    return Operation(
        **draft.model_dump(),
        id=operation_id or str(uuid.uuid4()),
        total_brl=compute_total_brl(draft.quantity, draft.price),
        final_rate=compute_final_rate(draft.quantity, draft.price, draft.fee),
    )


def filter_operations(
    operations: Iterable[Operation],
    pair: TradingPair | None = None,
    ticket_id: int | None = None,
) -> list[Operation]:
    """
    Select operations by pair and ticket, most recent trade date first.

    ``None`` means "any" for both filters.
    """
    selected = [
        op
        for op in operations
        if (pair is None or op.pair == pair)
        and (ticket_id is None or op.ticket_id == ticket_id)
    ]
    return sorted(selected, key=lambda op: op.trade_date, reverse=True)


def compute_totals(operations: list[Operation]) -> OperationTotals:
    """
    Compute the totals footer for a selection of operations.

    Quantity, fee and BRL total are summed; price and final rate are averaged.
    An empty selection yields all zeros.
    """
    count = len(operations)
    if count == 0:
        return OperationTotals()

    zero = Decimal("0")
    return OperationTotals(
        count=count,
        sum_quantity=sum((op.quantity for op in operations), zero),
        avg_price=sum((op.price for op in operations), zero) / count,
        sum_fee=sum((op.fee for op in operations), zero),
        sum_total_brl=sum((op.total_brl for op in operations), zero),
        avg_final_rate=sum((op.final_rate for op in operations), zero) / count,
    )
