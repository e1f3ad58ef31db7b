# shop_orders/modules/orders/pricing.py
"""
Order pricing: pure money arithmetic for carts, cash and installment orders.

Formulas (all money rounded to 2 places, half-up):
  line total       = quantity * unit_price
  subtotal         = sum(line totals)
  downpayment      = subtotal * 2%            (pre-interest subtotal)
  interest_amount  = subtotal * rate / 100
  total_cost       = subtotal + interest_amount
  remaining        = total_cost - downpayment
  daily_payment    = remaining / 50           (left unrounded here)

Nothing here performs I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Sequence

from ...constants import DOWNPAYMENT_RATE, SCHEDULE_DAYS
from ...utils.helpers import NumberLike, round2, round_rate, to_decimal
from ...utils.validators import is_non_negative_number, is_positive_int, non_empty
from .domain import CartItem, OrderItem
from .errors import InvalidCartError, InvalidRateError

_DOWNPAYMENT_RATE = Decimal(DOWNPAYMENT_RATE)
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricedCart:
    items: tuple[OrderItem, ...]
    subtotal: Decimal


@dataclass(frozen=True)
class InstallmentQuote:
    subtotal: Decimal
    interest_rate: Decimal
    downpayment: Decimal
    interest_amount: Decimal
    total_cost: Decimal
    remaining: Decimal
    daily_payment: Decimal


@dataclass(frozen=True)
class CashQuote:
    total_cost: Decimal


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def price_cart(items: Iterable[CartItem]) -> PricedCart:
    """
    Price each cart line and sum the subtotal.

    Raises InvalidCartError for an empty cart, a quantity that is not an
    integer >= 1, or a unit price that is missing or negative.
    """
    lines = list(items)
    if not lines:
        raise InvalidCartError("Cart is empty.")

    priced: list[OrderItem] = []
    for it in lines:
        if not is_positive_int(it.quantity):
            raise InvalidCartError(
                f"Quantity for '{it.product_name}' must be a whole number of at least 1."
            )
        if it.unit_price is None or not is_non_negative_number(it.unit_price):
            raise InvalidCartError(f"Unit price for '{it.product_name}' cannot be negative.")

        qty = int(to_decimal(it.quantity))
        unit = round2(it.unit_price)
        priced.append(
            OrderItem(
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=qty,
                unit_price=unit,
                total_price=round2(qty * unit),
            )
        )

    subtotal = sum((p.total_price for p in priced), Decimal("0.00"))
    return PricedCart(items=tuple(priced), subtotal=subtotal)


def price_installment(subtotal: NumberLike, interest_rate_percent: NumberLike | None) -> InstallmentQuote:
    if interest_rate_percent is None or (
        isinstance(interest_rate_percent, str) and not non_empty(interest_rate_percent)
    ):
        raise InvalidRateError("Interest rate is required for installment orders.")
    try:
        rate = to_decimal(interest_rate_percent)
    except ValueError as e:
        raise InvalidRateError(f"Invalid interest rate: {interest_rate_percent!r}") from e
    if not rate.is_finite() or rate < 0:
        raise InvalidRateError("Interest rate cannot be negative.")
    rate = round_rate(rate)

    sub = round2(subtotal)
    downpayment = round2(sub * _DOWNPAYMENT_RATE)
    interest_amount = round2(sub * rate / _HUNDRED)
    total_cost = sub + interest_amount
    remaining = total_cost - downpayment
    return InstallmentQuote(
        subtotal=sub,
        interest_rate=rate,
        downpayment=downpayment,
        interest_amount=interest_amount,
        total_cost=total_cost,
        remaining=remaining,
        daily_payment=remaining / SCHEDULE_DAYS,
    )


def price_cash(subtotal: NumberLike) -> CashQuote:
    return CashQuote(total_cost=round2(subtotal))


# ---------------------------------------------------------------------------
# Cart editing
# ---------------------------------------------------------------------------

def add_to_cart(
    cart: Sequence[CartItem],
    product_id: int,
    product_name: str,
    unit_price: NumberLike,
    quantity: int = 1,
) -> tuple[CartItem, ...]:
    """Add a product; a product already in the cart has its quantity increased."""
    if not is_positive_int(quantity):
        raise InvalidCartError("Quantity must be a whole number of at least 1.")
    qty = int(to_decimal(quantity))
    out = list(cart)
    for i, it in enumerate(out):
        if it.product_id == product_id:
            out[i] = replace(it, quantity=it.quantity + qty)
            return tuple(out)
    out.append(
        CartItem(
            product_id=product_id,
            product_name=product_name,
            quantity=qty,
            unit_price=round2(unit_price),
        )
    )
    return tuple(out)


def update_quantity(cart: Sequence[CartItem], product_id: int, quantity: int) -> tuple[CartItem, ...]:
    if not is_positive_int(quantity):
        raise InvalidCartError("Quantity must be a whole number of at least 1.")
    return tuple(
        replace(it, quantity=int(to_decimal(quantity))) if it.product_id == product_id else it
        for it in cart
    )


def remove_from_cart(cart: Sequence[CartItem], product_id: int) -> tuple[CartItem, ...]:
    return tuple(it for it in cart if it.product_id != product_id)
