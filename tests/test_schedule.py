"""
Payment schedule: generation (rounding / reconciliation) and the
mark-paid and cancel transitions on in-memory orders.
"""
from dataclasses import replace
from decimal import Decimal

import pytest

from shop_orders.modules.orders.domain import (
    CashOrder,
    InstallmentOrder,
    OrderItem,
    OrderStatus,
)
from shop_orders.modules.orders.errors import (
    AlreadyPaidError,
    OrderClosedError,
    PaymentNotFoundError,
)
from shop_orders.modules.orders.pricing import price_installment
from shop_orders.modules.orders.schedule import cancel, generate_schedule, is_settled, mark_paid

D = Decimal


def _installment(subtotal="1000.00", rate=5) -> InstallmentOrder:
    q = price_installment(D(subtotal), rate)
    return InstallmentOrder(
        order_id="ORD20260101-0001",
        customer_id=1,
        items=(OrderItem(1, "LED TV 32in", 2, D(subtotal) / 2, D(subtotal)),),
        order_date="2026-01-01",
        total_cost=q.total_cost,
        interest_rate=q.interest_rate,
        downpayment=q.downpayment,
        daily_payment=q.daily_payment.quantize(D("0.01")),
        total_collected=q.downpayment,
        payments=generate_schedule(q.daily_payment, q.remaining),
    )


def _cash() -> CashOrder:
    return CashOrder(
        order_id="ORD20260101-0002",
        customer_id=1,
        items=(OrderItem(2, "Stand Fan", 1, D("250.00"), D("250.00")),),
        order_date="2026-01-01",
        total_cost=D("250.00"),
        total_collected=D("250.00"),
    )


# ---------------------------------------------------------------------------
# generate_schedule
# ---------------------------------------------------------------------------

def test_schedule_has_fifty_unpaid_days():
    rows = generate_schedule(D("20.6"), D("1030.00"))
    assert len(rows) == 50
    assert [p.day for p in rows] == list(range(1, 51))
    assert not any(p.paid for p in rows)
    assert all(p.date_paid is None and p.payment_method is None for p in rows)


def test_even_split_for_1030():
    rows = generate_schedule(D("20.6"), D("1030.00"))
    assert {p.amount for p in rows} == {D("20.60")}
    assert sum(p.amount for p in rows) == D("1030.00")


def test_last_day_absorbs_rounding():
    remaining = D("1014.99")
    rows = generate_schedule(remaining / 50, remaining)
    assert all(p.amount == D("20.30") for p in rows[:49])
    assert rows[-1].amount == D("20.29")
    assert sum(p.amount for p in rows) == remaining


@pytest.mark.parametrize("remaining", ["0.75", "0.49", "0.01", "12.24", "0.00"])
def test_small_balances_reconcile_without_negative_days(remaining):
    r = D(remaining)
    rows = generate_schedule(r / 50, r)
    assert sum(p.amount for p in rows) == r
    assert all(p.amount >= 0 for p in rows)


# ---------------------------------------------------------------------------
# mark_paid
# ---------------------------------------------------------------------------

def test_mark_day_one_adds_daily_amount():
    order = _installment()
    updated = mark_paid(order, 1, "Cash", paid_on="2026-01-02")
    day1 = updated.payment_for(1)
    assert day1.paid and day1.date_paid == "2026-01-02" and day1.payment_method == "Cash"
    assert updated.total_collected == D("40.60")
    assert updated.status is OrderStatus.ACTIVE
    # the input order is untouched
    assert order.payment_for(1).paid is False
    assert order.total_collected == D("20.00")


def test_paid_date_defaults_to_today():
    updated = mark_paid(_installment(), 3)
    assert updated.payment_for(3).date_paid is not None
    assert updated.payment_for(3).payment_method == "Cash"


def test_notes_are_trimmed_and_blank_is_none():
    o = mark_paid(_installment(), 1, "Bank Transfer", "  ref 991  ")
    assert o.payment_for(1).notes == "ref 991"
    o = mark_paid(o, 2, "Credit Card", "   ")
    assert o.payment_for(2).notes is None


def test_second_mark_on_same_day_rejected():
    once = mark_paid(_installment(), 5)
    with pytest.raises(AlreadyPaidError):
        mark_paid(once, 5)
    assert once.total_collected == D("40.60")


@pytest.mark.parametrize("day", [0, 51, -3, "1", None])
def test_day_out_of_range(day):
    with pytest.raises(PaymentNotFoundError):
        mark_paid(_installment(), day)


def test_cash_order_has_no_schedule():
    with pytest.raises(PaymentNotFoundError):
        mark_paid(_cash(), 1)


def test_unknown_method_rejected_before_change():
    with pytest.raises(ValueError):
        mark_paid(_installment(), 1, "Cheque")


def test_all_days_paid_completes_order():
    order = _installment()
    for day in reversed(range(1, 51)):
        assert order.status is OrderStatus.ACTIVE
        order = mark_paid(order, day)
    assert order.status is OrderStatus.COMPLETED
    assert order.total_collected == order.total_cost == D("1050.00")
    assert is_settled(order)


def test_uneven_schedule_completes_exactly():
    order = _installment("999.99", "3.5")
    for day in range(1, 51):
        order = mark_paid(order, day)
    assert order.status is OrderStatus.COMPLETED
    assert order.total_collected == order.total_cost


@pytest.mark.parametrize("status", [OrderStatus.CANCELLED, OrderStatus.COMPLETED])
def test_closed_orders_reject_every_day(status):
    order = replace(_installment(), status=status)
    for day in range(1, 51):
        with pytest.raises(OrderClosedError):
            mark_paid(order, day)


def test_zero_cost_order_settles_only_when_all_paid():
    order = _installment("0.00", 0)
    order = mark_paid(order, 1)
    assert order.status is OrderStatus.ACTIVE
    for day in range(2, 51):
        order = mark_paid(order, day)
    assert order.status is OrderStatus.COMPLETED


# ---------------------------------------------------------------------------
# cancel
# ---------------------------------------------------------------------------

def test_cancel_active_installment():
    assert cancel(_installment()).status is OrderStatus.CANCELLED


def test_cancel_cash_sale_voids_it():
    assert cancel(_cash()).status is OrderStatus.CANCELLED


def test_cancel_rejects_closed_installments():
    with pytest.raises(OrderClosedError):
        cancel(replace(_installment(), status=OrderStatus.COMPLETED))
    with pytest.raises(OrderClosedError):
        cancel(replace(_installment(), status=OrderStatus.CANCELLED))
