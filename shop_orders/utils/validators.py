# utils/validators.py
from .helpers import to_decimal


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_decimal(x):
    """
    Best-effort parse to Decimal.

    Returns:
        (ok: bool, value: Decimal|None)
    """
    try:
        return True, to_decimal(x)
    except ValueError:
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a number and value >= 0.
    """
    ok, val = try_parse_decimal(x)
    return bool(ok and val is not None and val.is_finite() and val >= 0)


def is_positive_int(x) -> bool:
    """
    True iff x is an integral value >= 1 (bools are rejected).
    """
    if isinstance(x, bool):
        return False
    ok, val = try_parse_decimal(x)
    return bool(ok and val is not None and val.is_finite() and val == val.to_integral_value() and val >= 1)
