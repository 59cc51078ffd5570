"""Conversion between BRL amounts and integer minor units, plus pt-BR display."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

CENT = Decimal("0.01")


def to_decimal(amount: Decimal | int | float | str) -> Decimal:
    """
    Coerce a user-supplied amount to Decimal.

    Floats go through their ``str`` form so that 0.1 stays 0.1 instead of
    picking up binary noise.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, float):
        value = Decimal(str(amount))
    else:
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {amount!r}") from e

    if not value.is_finite():
        raise ValueError(f"Not a finite number: {amount!r}")
    return value


def to_cents(amount: Decimal | int | float | str) -> int:
    """
    Convert a BRL amount to integer cents.
    Uses ROUND_HALF_UP for consistency.

    Args:
        amount: Amount in reais

    Returns:
        Amount in cents (integer)

    Raises:
        ValueError: If the amount is not a number or too large to hold in cents
    """
    cents = to_decimal(amount) * 100
    try:
        return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range: {amount!r}") from e


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-digit Decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def format_number(value: Decimal | int | float, decimals: int = 2) -> str:
    """
    Format a number with pt-BR separators.

    Example:
        format_number(Decimal("1234.5"), 4) -> "1.234,5000"
    """
    value = to_decimal(value)
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # Enough digits for the integer part plus the requested decimals
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
    formatted = f"{rounded:,.{decimals}f}"
    # Swap the en-US separators for the pt-BR ones
    return formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def format_brl(amount: Decimal | int | float) -> str:
    """Format an amount as BRL currency: ``R$ 1.234,56``."""
    value = to_decimal(amount)
    if value < 0:
        return f"-R$ {format_number(-value)}"
    return f"R$ {format_number(value)}"


def format_copy_value(amount: Decimal) -> str:
    """
    Format an amount the way it is pasted into a bank transfer form.

    No thousands separator, comma as decimal mark: ``1234,56``.
    """
    return f"{to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)}".replace(
        ".", ","
    )
