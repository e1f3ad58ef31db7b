# shop_orders/modules/orders/schedule.py
"""
Installment payment schedule: generation and the one-way unpaid -> paid
transition of a single day.

Every function here takes an order value and returns a new one; the
payments tuple is replaced, never mutated in place. Persisting the result
is the caller's job (see OrderService).

Rounding policy for generate_schedule: each day is the daily payment
rounded to 2 places (half-up) and day 50 absorbs the difference, so the
50 amounts always add up to exactly `remaining`. If half-up rounding
would push the last day below zero (only possible for very small
balances) the per-day amount is truncated instead.
"""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal, ROUND_DOWN
from typing import Optional

from ...constants import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS, SCHEDULE_DAYS
from ...utils.helpers import CENT, NumberLike, round2, to_decimal, today_str
from .domain import (
    CLOSED_STATUSES,
    InstallmentOrder,
    Order,
    OrderStatus,
    OrderType,
    Payment,
)
from .errors import AlreadyPaidError, OrderClosedError, PaymentNotFoundError

# half a minor unit
SETTLE_TOLERANCE = Decimal("0.005")


def generate_schedule(daily_payment: NumberLike, remaining: NumberLike) -> tuple[Payment, ...]:
    """
    Build the 50 unpaid schedule rows (day 1..50) for a new installment order.
    """
    total = round2(remaining)
    per_day = round2(daily_payment)
    last = total - per_day * (SCHEDULE_DAYS - 1)
    if last < 0:
        per_day = to_decimal(daily_payment).quantize(CENT, rounding=ROUND_DOWN)
        last = total - per_day * (SCHEDULE_DAYS - 1)

    amounts = [per_day] * (SCHEDULE_DAYS - 1) + [last]
    return tuple(Payment(day=i + 1, amount=a) for i, a in enumerate(amounts))


def collected_from(downpayment: Decimal, payments: tuple[Payment, ...]) -> Decimal:
    """total_collected = downpayment + sum of paid days."""
    return downpayment + sum((p.amount for p in payments if p.paid), Decimal("0.00"))


def is_settled(order: InstallmentOrder) -> bool:
    """
    True once every day is paid, or collections reach the total cost
    (within half a minor unit). A zero-cost order settles only when all
    days are paid.
    """
    if order.payments and all(p.paid for p in order.payments):
        return True
    return order.total_cost > 0 and order.total_collected >= order.total_cost - SETTLE_TOLERANCE


def normalize_method(method: Optional[str]) -> str:
    m = (method or "").strip() or DEFAULT_PAYMENT_METHOD
    if m not in PAYMENT_METHODS:
        raise ValueError(f"Unsupported payment method: {m}")
    return m


def mark_paid(
    order: Order,
    day: int,
    method: Optional[str] = DEFAULT_PAYMENT_METHOD,
    notes: Optional[str] = None,
    *,
    paid_on: Optional[str] = None,
) -> InstallmentOrder:
    """
    Mark one schedule day paid and return the updated order.

    Checks run before anything changes:
      PaymentNotFoundError  cash order, or day outside 1..50
      OrderClosedError      order is completed or cancelled
      AlreadyPaidError      the day is already paid
      ValueError            unknown payment method
    """
    if order.order_type is not OrderType.INSTALLMENT or not order.payments:
        raise PaymentNotFoundError(f"Order {order.order_id} has no payment schedule.")
    if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= SCHEDULE_DAYS:
        raise PaymentNotFoundError(f"Day {day!r} is not in the 1..{SCHEDULE_DAYS} schedule.")

    if order.status in CLOSED_STATUSES:
        raise OrderClosedError(f"Order {order.order_id} is {order.status.value}.")

    entry = order.payment_for(day)
    if entry is None:
        raise PaymentNotFoundError(f"Day {day} not found on order {order.order_id}.")
    if entry.paid:
        raise AlreadyPaidError(f"Day {day} of order {order.order_id} is already paid.")

    method_n = normalize_method(method)
    notes_n = notes.strip() if notes and notes.strip() else None

    paid_entry = replace(
        entry,
        paid=True,
        date_paid=paid_on or today_str(),
        payment_method=method_n,
        notes=notes_n,
    )
    payments = tuple(paid_entry if p.day == day else p for p in order.payments)
    updated = replace(
        order,
        payments=payments,
        total_collected=collected_from(order.downpayment, payments),
    )
    if is_settled(updated):
        updated = replace(updated, status=OrderStatus.COMPLETED)
    return updated


def cancel(order: Order) -> Order:
    """
    Cancel an order. Active orders of either type may be cancelled; a
    completed cash sale may be voided. Completed installment orders and
    already-cancelled orders are closed.
    """
    if order.status is OrderStatus.CANCELLED:
        raise OrderClosedError(f"Order {order.order_id} is already cancelled.")
    if order.status is OrderStatus.COMPLETED and order.order_type is OrderType.INSTALLMENT:
        raise OrderClosedError(f"Order {order.order_id} is completed.")
    return replace(order, status=OrderStatus.CANCELLED)
