"""Weight and purity helpers shared by the draft, inventory and transfer paths"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Scales of the weight and purity columns
WEIGHT_STEP = Decimal("0.0001")
PURITY_STEP = Decimal("0.000001")

Number = Union[Decimal, float, int, str]


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """
    Coerce a stored or submitted number to Decimal.

    Floats go through str() so 0.75 stays 0.75 instead of its binary expansion.
    Returns None for None and for values that are not numbers.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def normalize_purity(value: Optional[Number]) -> Optional[Decimal]:
    """
    Return purity as a fraction in [0, 1], at the purity column's scale.

    Values in [0, 1] are already fractions; values in (1, 100] are percentages.
    A purity of exactly 1 is read as 100%, never as 1%.

    Raises:
        ValueError: negative purity or a percentage above 100
    """
    purity = to_decimal(value)
    if purity is None:
        return None
    if purity < ZERO:
        raise ValueError(f"Purity cannot be negative ({purity})")
    if purity > HUNDRED:
        raise ValueError(f"Purity must be a fraction or a percentage up to 100 ({purity})")
    if purity > ONE:
        purity = purity / HUNDRED
    return purity.quantize(PURITY_STEP, rounding=ROUND_HALF_UP)


def compute_pure_weight(gross_weight: Optional[Number], purity_fraction: Optional[Number]) -> Decimal:
    """
    gross × purity rounded to the weight column's scale, so a freshly
    computed value compares equal to the stored one. Missing inputs count as zero.
    """
    gross = to_decimal(gross_weight) or ZERO
    purity = to_decimal(purity_fraction) or ZERO
    return (gross * purity).quantize(WEIGHT_STEP, rounding=ROUND_HALF_UP)


def is_positive(value: Optional[Number]) -> bool:
    number = to_decimal(value)
    return number is not None and number > ZERO


def clamped_subtract(current: Optional[Number], amount: Number, label: str = "balance") -> Decimal:
    """
    current - amount, floored at zero.

    Underflow is logged so reconciliation can find it; it never raises.
    """
    current_value = to_decimal(current) or ZERO
    result = current_value - (to_decimal(amount) or ZERO)
    if result < ZERO:
        logger.warning(
            "Clamped %s underflow: %s - %s floored to 0", label, current_value, amount
        )
        return ZERO
    return result
