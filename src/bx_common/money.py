"""Fixed-point money arithmetic for escrow settlement.

All prices, amounts and quantities use decimal.Decimal. No float anywhere.
Money is held to 2 decimal places, quantities to 4.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
QUANTITY_STEP = Decimal("0.0001")


def round2(value: Decimal) -> Decimal:
    """Round half away from zero to 2 decimal places.

    Decimal's ROUND_HALF_UP rounds away from zero for ties, so
    round2(Decimal("-0.125")) == Decimal("-0.13").
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Decimal:
    """Coerce user input to a finite Decimal. Raises ValueError otherwise.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    else:
        raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def money_to_display(amount: Decimal) -> str:
    """Convert an amount to a display string: 3422.5 -> '$3,422.50', -12 -> '-$12.00'."""
    amount = round2(amount)
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


def quantity_to_display(quantity: Decimal) -> str:
    """Strip storage padding: Decimal('5.0000') -> '5', Decimal('2.5000') -> '2.5'."""
    return f"{quantity.normalize():f}"
