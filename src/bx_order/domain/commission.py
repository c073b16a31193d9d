"""Commission split between platform and seller.

total      = round2(quantity * unit_price)
commission = round2(total * rate)
seller_net = total - commission

seller_net is derived by subtraction, never rounded independently, so
commission + seller_net == total holds exactly for every input.
"""
from dataclasses import dataclass
from decimal import Decimal

from src.bx_common.money import round2

# Matches orders.commission_rate NUMERIC(6, 4)
RATE_STEP = Decimal("0.0001")


def validate_commission_rate(rate: Decimal) -> Decimal:
    """Reject rates outside [0, 1) or finer than the stored 4 decimal places.

    The rate is snapshotted on every order, so it must survive storage unchanged
    for commission_amount to be recomputable from it.
    """
    if not (Decimal(0) <= rate < Decimal(1)):
        raise ValueError(f"Commission rate must be in [0, 1), got {rate}")
    if rate != rate.quantize(RATE_STEP):
        raise ValueError(f"Commission rate supports at most 4 decimal places, got {rate}")
    return rate


@dataclass(frozen=True)
class SettlementAmounts:
    total_amount: Decimal
    commission_amount: Decimal
    seller_net: Decimal


def compute_settlement(
    quantity: Decimal, unit_price: Decimal, commission_rate: Decimal
) -> SettlementAmounts:
    validate_commission_rate(commission_rate)
    total = round2(quantity * unit_price)
    commission = round2(total * commission_rate)
    return SettlementAmounts(
        total_amount=total,
        commission_amount=commission,
        seller_net=total - commission,
    )
