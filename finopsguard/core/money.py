"""Money rounding helpers."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round to 2 decimals using half-up rounding (not banker's rounding)."""
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))
