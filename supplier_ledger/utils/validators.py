# supplier_ledger/utils/validators.py
import math


def non_empty(text) -> bool:
    """True if `text` holds something besides whitespace."""
    return bool(text and str(text).strip())


def as_amount(x):
    """Quantity or money value as a finite float; None when it is not one."""
    if isinstance(x, bool):
        return None
    try:
        val = float(x)
    except (TypeError, ValueError):
        return None
    return val if math.isfinite(val) else None


def is_non_negative_number(x) -> bool:
    val = as_amount(x)
    return val is not None and val >= 0


def is_strictly_positive_number(x) -> bool:
    val = as_amount(x)
    return val is not None and val > 0
