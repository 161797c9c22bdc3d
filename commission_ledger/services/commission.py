"""
Commission calculation.

Rules:
- commission[role] = amount * pct[role] / 100, rounded to paise (0.01)
- Rounding is ROUND_HALF_EVEN so totals are reproducible across runs
- Percentages are absolute cuts of the amount; the sum may not exceed 100
- The rounded total never exceeds the amount
"""

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Dict, Iterable, Mapping, Optional

from commission_ledger.errors import InvalidCommissionInput
from commission_ledger.models.actor import ActorRole

CURRENCY_QUANT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_money(value) -> Decimal:
    """Quantize a value to currency precision."""
    return Decimal(value).quantize(CURRENCY_QUANT, rounding=ROUND_HALF_EVEN)


def validate_percentage(role, pct: Decimal) -> Decimal:
    pct = Decimal(pct)
    if pct < ZERO or pct > HUNDRED:
        raise InvalidCommissionInput(f"Percentage for {role} must be within [0, 100], got {pct}")
    return pct


def calculate_commissions(
    amount: Decimal,
    rates: Mapping[ActorRole, Decimal],
    roles: Optional[Iterable[ActorRole]] = None,
) -> Dict[ActorRole, Decimal]:
    """Split a transaction amount into per-role commissions.

    Pure function, no I/O.

    Args:
        amount: Transaction amount (non-negative)
        rates: Percentage per role, e.g. {SERVICE_AGENT: Decimal("3")}
        roles: Roles actually present; defaults to every role in rates

    Returns:
        Commission amount per role, quantized to 0.01
    """
    amount = Decimal(amount)
    if amount < ZERO:
        raise InvalidCommissionInput(f"Amount must be non-negative, got {amount}")

    selected = list(roles) if roles is not None else list(rates)
    exact: Dict[ActorRole, Decimal] = {}
    for role in selected:
        pct = validate_percentage(role, rates.get(role, ZERO))
        exact[role] = amount * pct / HUNDRED

    if sum(Decimal(rates.get(role, ZERO)) for role in selected) > HUNDRED:
        raise InvalidCommissionInput("Commission percentages add up to more than 100")

    breakdown = {role: to_money(value) for role, value in exact.items()}

    # Rounding up several tiny shares can overshoot the amount itself.
    # Take the excess cents back from the roles that gained most.
    overshoot = sum(breakdown.values(), ZERO) - amount
    if overshoot > ZERO:
        by_gain = sorted(selected, key=lambda r: breakdown[r] - exact[r], reverse=True)
        for role in by_gain:
            if overshoot <= ZERO:
                break
            take = min(CURRENCY_QUANT, breakdown[role])
            breakdown[role] -= take
            overshoot -= take

    return breakdown


def total_commission(breakdown: Mapping[ActorRole, Decimal]) -> Decimal:
    """Sum of a breakdown, in currency precision."""
    return to_money(sum(breakdown.values(), ZERO))
