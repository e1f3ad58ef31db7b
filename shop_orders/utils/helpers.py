# utils/helpers.py
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Union, Optional

NumberLike = Union[Decimal, float, int, str]

CENT = Decimal("0.01")
RATE_STEP = Decimal("0.0001")

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def to_decimal(v: NumberLike) -> Decimal:
    """
    Convert a number-like value to Decimal without binary float noise.

    Floats go through str() first so that 20.6 becomes Decimal("20.6")
    rather than Decimal(20.60000000000000142...). Raises ValueError on
    anything that does not parse.
    """
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v).strip())
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Could not parse {v!r} as a number.") from e


def round2(v: NumberLike) -> Decimal:
    """Round to the currency minor unit (2 places, half-up)."""
    return to_decimal(v).quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(v: NumberLike) -> Decimal:
    """Interest rate percent at the stored scale (4 places, half-up)."""
    return to_decimal(v).quantize(RATE_STEP, rounding=ROUND_HALF_UP)


def money_str(v: Optional[NumberLike]) -> Optional[str]:
    """Storage form for money columns: '20.60'. None passes through."""
    if v is None:
        return None
    return str(round2(v))


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.
    """
    try:
        x = to_decimal(v)
    except ValueError as e:
        _log.debug("fmt_money: failed to parse %r: %s", v, e)
        if strict:
            raise
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"
