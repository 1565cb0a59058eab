"""
Split validation, month keys and the salary distribution calculator.

All functions here are pure: no database access, no request state.
"""

from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Optional
import math
import re

from spewn.utils.errors import ValidationError

MONTH_PATTERN = re.compile(r'([0-9]{4})-([0-9]{2})')


def to_number(value) -> float:
    """
    Coerce a client-supplied value to a float.

    Missing, boolean, non-numeric and non-finite values count as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def splits_total(splits: Optional[Dict]) -> float:
    """Sum of all bucket percentages, non-numeric entries counted as 0."""
    return sum(to_number(v) for v in (splits or {}).values())


def clean_splits(splits: Optional[Dict]) -> Dict:
    """Copy of splits with every percentage coerced to a number."""
    return {
        bucket: pct if isinstance(pct, int) and not isinstance(pct, bool) else to_number(pct)
        for bucket, pct in (splits or {}).items()
    }


def validate_splits(splits: Optional[Dict]) -> None:
    """
    Require the bucket percentages to sum to exactly 100.

    Raises:
        ValidationError: if the sum differs from 100 by any amount.
    """
    if splits is not None and not isinstance(splits, dict):
        raise ValidationError('Splits must be an object of bucket percentages')
    if splits_total(splits) != 100:
        raise ValidationError('Splits must sum to 100')


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (500.5 -> 501, -0.5 -> 0)."""
    return int((Decimal(str(value)) + Decimal('0.5')).to_integral_value(rounding=ROUND_FLOOR))


def compute_distribution(salary, splits: Optional[Dict], extra_income=0) -> Dict[str, int]:
    """
    Map salary plus extra income onto per-bucket amounts.

    Each bucket gets round(total * pct / 100) independently, so the parts
    may not add back up to the total exactly. That drift is left as is.

    Args:
        salary: Monthly salary; invalid values count as 0
        splits: Mapping of bucket -> percentage
        extra_income: One-off income added on top of salary

    Returns:
        Dict of bucket -> whole-unit amount, in the order of ``splits``
    """
    total = to_number(salary) + to_number(extra_income)
    return {
        bucket: round_half_up(total * to_number(pct) / 100)
        for bucket, pct in (splits or {}).items()
    }


def is_valid_month(value) -> bool:
    """True iff value is a 'YYYY-MM' string with month in 01..12."""
    if not value or not isinstance(value, str):
        return False
    match = MONTH_PATTERN.fullmatch(value)
    if not match:
        return False
    return 1 <= int(match.group(2)) <= 12


def current_month(now: Optional[datetime] = None) -> str:
    """The current UTC month as 'YYYY-MM'."""
    return (now or datetime.utcnow()).strftime('%Y-%m')
