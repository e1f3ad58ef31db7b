from dataclasses import replace
from decimal import Decimal

from shop_orders.modules.orders.domain import CashOrder, InstallmentOrder, OrderItem, OrderStatus
from shop_orders.modules.orders.metrics import (
    installment_summary,
    paid_day_count,
    progress_percent,
    remaining_balance,
    sales_summary,
)
from shop_orders.modules.orders.pricing import price_installment
from shop_orders.modules.orders.schedule import generate_schedule, mark_paid

D = Decimal


def _installment(oid="ORD20260101-0001", subtotal="1000.00", rate=5) -> InstallmentOrder:
    q = price_installment(D(subtotal), rate)
    return InstallmentOrder(
        order_id=oid,
        customer_id=1,
        items=(OrderItem(1, "LED TV 32in", 1, D(subtotal), D(subtotal)),),
        order_date="2026-01-01",
        total_cost=q.total_cost,
        interest_rate=q.interest_rate,
        downpayment=q.downpayment,
        daily_payment=q.daily_payment.quantize(D("0.01")),
        total_collected=q.downpayment,
        payments=generate_schedule(q.daily_payment, q.remaining),
    )


def _cash(oid="ORD20260101-0009", total="250.00") -> CashOrder:
    return CashOrder(
        order_id=oid,
        customer_id=1,
        items=(OrderItem(2, "Stand Fan", 1, D(total), D(total)),),
        order_date="2026-01-01",
        total_cost=D(total),
        total_collected=D(total),
    )


def test_new_installment_figures():
    o = _installment()
    assert remaining_balance(o) == D("1030.00")
    assert paid_day_count(o) == 0
    assert progress_percent(o) == D("1.90")    # 20 / 1050


def test_figures_after_payments():
    o = mark_paid(mark_paid(_installment(), 1), 2)
    assert paid_day_count(o) == 2
    assert remaining_balance(o) == D("1050.00") - D("61.20")
    assert progress_percent(o) == D("5.83")


def test_cash_order_is_fully_collected():
    c = _cash()
    assert remaining_balance(c) == D("0.00")
    assert progress_percent(c) == D("100")
    assert paid_day_count(c) == 0


def test_progress_caps_at_100_and_handles_zero_cost():
    over = replace(_installment(), total_collected=D("2000.00"))
    assert progress_percent(over) == D("100")
    zero = _installment(subtotal="0.00", rate=0)
    assert progress_percent(zero) == D("0.00")


def test_sales_summary_excludes_cancelled_sales():
    active = mark_paid(_installment("ORD20260101-0001"), 1)            # 1050, collected 40.60
    cancelled = replace(_installment("ORD20260101-0002"), status=OrderStatus.CANCELLED)
    cash = _cash("ORD20260101-0003", "250.00")
    voided = replace(_cash("ORD20260101-0004", "99.00"), status=OrderStatus.CANCELLED)

    s = sales_summary([active, cancelled, cash, voided])
    assert s.cash_sales == D("250.00")
    assert s.installment_sales == D("1050.00")
    assert s.total_sales == D("1300.00")
    # downpayment taken on the cancelled order still counts as collected
    assert s.collected_from_installments == D("60.60")
    assert s.outstanding_balance == D("989.40")


def test_installment_summary_counts_by_status():
    done = _installment("ORD20260101-0001")
    for day in range(1, 51):
        done = mark_paid(done, day)
    running = _installment("ORD20260101-0002")

    s = installment_summary([done, running, _cash()])
    assert (s.active_count, s.completed_count) == (1, 1)
    assert s.total_collected == D("1070.00")
    assert s.total_outstanding == D("1030.00")
