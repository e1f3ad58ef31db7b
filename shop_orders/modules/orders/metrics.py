# shop_orders/modules/orders/metrics.py
"""Read-only order figures used by listing and report views."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ...utils.helpers import round2
from .domain import Order, OrderStatus, OrderType

_ZERO = Decimal("0.00")
_HUNDRED = Decimal("100")


def remaining_balance(order: Order) -> Decimal:
    if order.order_type is OrderType.CASH:
        return _ZERO
    return order.total_cost - order.total_collected


def progress_percent(order: Order) -> Decimal:
    """Collected share of total cost, capped at 100. Zero-cost orders report 0."""
    if order.total_cost <= 0:
        return _ZERO
    return min(_HUNDRED, round2(order.total_collected / order.total_cost * _HUNDRED))


def paid_day_count(order: Order) -> int:
    if order.order_type is not OrderType.INSTALLMENT:
        return 0
    return sum(1 for p in order.payments if p.paid)


# ---------------------------------------------------------------------------
# Portfolio summaries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SalesSummary:
    total_sales: Decimal
    cash_sales: Decimal
    installment_sales: Decimal
    collected_from_installments: Decimal
    outstanding_balance: Decimal


@dataclass(frozen=True)
class InstallmentSummary:
    active_count: int
    completed_count: int
    total_collected: Decimal
    total_outstanding: Decimal


def sales_summary(orders: Iterable[Order]) -> SalesSummary:
    """
    Sales totals exclude cancelled orders. Collections include whatever
    was taken on cancelled installment orders before they were cancelled.
    """
    cash = installment = collected = _ZERO
    for o in orders:
        if o.order_type is OrderType.INSTALLMENT:
            collected += o.total_collected
        if o.status is OrderStatus.CANCELLED:
            continue
        if o.order_type is OrderType.CASH:
            cash += o.total_cost
        else:
            installment += o.total_cost
    return SalesSummary(
        total_sales=cash + installment,
        cash_sales=cash,
        installment_sales=installment,
        collected_from_installments=collected,
        outstanding_balance=installment - collected,
    )


def installment_summary(orders: Iterable[Order]) -> InstallmentSummary:
    active = completed = 0
    collected = outstanding = _ZERO
    for o in orders:
        if o.order_type is not OrderType.INSTALLMENT:
            continue
        if o.status is OrderStatus.ACTIVE:
            active += 1
        elif o.status is OrderStatus.COMPLETED:
            completed += 1
        collected += o.total_collected
        outstanding += remaining_balance(o)
    return InstallmentSummary(
        active_count=active,
        completed_count=completed,
        total_collected=collected,
        total_outstanding=outstanding,
    )
