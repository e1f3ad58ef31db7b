# shop_orders/modules/orders/service.py
"""
OrderService: creates cash and installment orders, records schedule
payments and cancels orders.

Pricing and schedule rules run on in-memory values first (pricing.py,
schedule.py); only a fully validated order reaches the repository. After
each successful commit the registered listeners receive an OrderEvent.
"""
from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, Optional

from ...constants import DEFAULT_PAYMENT_METHOD
from ...utils.helpers import round2, today_str
from ...utils.loggers import get_logger
from . import pricing, schedule
from .domain import CartItem, CashOrder, InstallmentOrder, Order, OrderStatus
from .errors import OrderNotFoundError, PersistenceError
from .events import EventKind, OrderEvent, OrderListener

if TYPE_CHECKING:  # pragma: no cover
    from ...database.repositories.orders_repo import OrdersRepo

_log = get_logger(__name__)


class OrderService:
    def __init__(self, repo: "OrdersRepo", listeners: Optional[Iterable[OrderListener]] = None):
        self.repo = repo
        self._listeners: list[OrderListener] = list(listeners or [])

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def subscribe(self, listener: OrderListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: OrderListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: EventKind, order: Order, day: Optional[int] = None) -> None:
        event = OrderEvent(kind=kind, order=order, day=day)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # the commit already happened; a broken view must not undo it
                _log.exception("Order listener failed for %s on %s", kind.value, order.order_id)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create_cash_order(
        self,
        customer_id: int,
        items: Iterable[CartItem],
        order_date: Optional[str] = None,
    ) -> CashOrder:
        """
        Cash sale: settled on creation (status completed, collected = total).
        No payment rows are created.
        """
        self._ensure_customer(customer_id)
        priced = pricing.price_cart(items)
        quote = pricing.price_cash(priced.subtotal)
        order = CashOrder(
            order_id=None,
            customer_id=customer_id,
            items=priced.items,
            order_date=order_date or today_str(),
            total_cost=quote.total_cost,
            total_collected=quote.total_cost,
            status=OrderStatus.COMPLETED,
        )
        saved = self._insert(order)
        _log.info("Cash order %s created: total=%s", saved.order_id, saved.total_cost)
        self._emit(EventKind.ORDER_CREATED, saved)
        return saved

    def create_installment_order(
        self,
        customer_id: int,
        items: Iterable[CartItem],
        interest_rate,
        order_date: Optional[str] = None,
    ) -> InstallmentOrder:
        """
        Installment sale: 2% downpayment collected up front, the rest over a
        50-day schedule of unpaid rows.
        """
        self._ensure_customer(customer_id)
        priced = pricing.price_cart(items)
        quote = pricing.price_installment(priced.subtotal, interest_rate)
        payments = schedule.generate_schedule(quote.daily_payment, quote.remaining)
        order = InstallmentOrder(
            order_id=None,
            customer_id=customer_id,
            items=priced.items,
            order_date=order_date or today_str(),
            total_cost=quote.total_cost,
            interest_rate=quote.interest_rate,
            downpayment=quote.downpayment,
            daily_payment=round2(quote.daily_payment),
            total_collected=quote.downpayment,
            payments=payments,
            status=OrderStatus.ACTIVE,
        )
        saved = self._insert(order)
        _log.info(
            "Installment order %s created: total=%s downpayment=%s daily=%s",
            saved.order_id, saved.total_cost, saved.downpayment, saved.daily_payment,
        )
        self._emit(EventKind.ORDER_CREATED, saved)
        return saved

    # ------------------------------------------------------------------
    # Payments / status
    # ------------------------------------------------------------------
    def mark_paid(
        self,
        order_id: str,
        day: int,
        method: Optional[str] = DEFAULT_PAYMENT_METHOD,
        notes: Optional[str] = None,
        *,
        paid_on: Optional[str] = None,
    ) -> InstallmentOrder:
        """
        Record the payment for one schedule day.

        The order is re-read inside the write transaction so a second caller
        for the same day sees the committed row and gets AlreadyPaidError.
        """
        try:
            with self.repo.transaction():
                order = self._load(order_id)
                updated = schedule.mark_paid(order, day, method, notes, paid_on=paid_on)
                entry = updated.payment_for(day)
                collected, status = self.repo.update_payment_and_order(
                    entry.payment_id,
                    {
                        "date_paid": entry.date_paid,
                        "payment_method": entry.payment_method,
                        "notes": entry.notes,
                    },
                    updated.order_id,
                    {
                        "total_collected": updated.total_collected,
                        "status": updated.status,
                    },
                )
                updated = replace(updated, total_collected=collected, status=status)
        except PersistenceError:
            _log.error("Failed to record day %s on order %s", day, order_id)
            raise

        _log.info(
            "Order %s day %s paid (%s): collected=%s/%s",
            order_id, day, entry.payment_method, updated.total_collected, updated.total_cost,
        )
        self._emit(EventKind.PAYMENT_RECORDED, updated, day)
        if updated.status is not order.status:
            _log.info("Order %s completed", order_id)
            self._emit(EventKind.STATUS_CHANGED, updated)
        return updated

    def cancel_order(self, order_id: str) -> Order:
        with self.repo.transaction():
            order = self._load(order_id)
            cancelled = schedule.cancel(order)
            self.repo.set_status(order_id, cancelled.status, expected=order.status)
        _log.info("Order %s cancelled", order_id)
        self._emit(EventKind.STATUS_CHANGED, cancelled)
        return cancelled

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def get_order(self, order_id: str) -> Order:
        return self._load(order_id)

    def list_orders(self, order_type=None, status=None) -> list[Order]:
        return self.repo.list_orders(order_type, status)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _load(self, order_id: str) -> Order:
        order = self.repo.get_order_with_payments_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order not found: {order_id}")
        return order

    def _insert(self, order: Order) -> Order:
        try:
            return self.repo.insert_order_with_items_and_payments(order)
        except PersistenceError:
            _log.error("Failed to save %s order for customer %s", order.order_type.value, order.customer_id)
            raise

    @staticmethod
    def _ensure_customer(customer_id) -> None:
        if not customer_id:
            raise ValueError("Customer is required.")
