# shop_orders/modules/orders/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


class OrderType(str, Enum):
    CASH = "cash"
    INSTALLMENT = "installment"


class OrderStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


CLOSED_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


@dataclass(frozen=True)
class CartItem:
    """A line in a cart before pricing; name and price are snapshots."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    item_id: Optional[int] = None


@dataclass(frozen=True)
class Payment:
    """One day of an installment schedule."""
    day: int
    amount: Decimal
    paid: bool = False
    date_paid: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    payment_id: Optional[int] = None


@dataclass(frozen=True)
class CashOrder:
    order_type: ClassVar[OrderType] = OrderType.CASH

    order_id: Optional[str]
    customer_id: int
    items: tuple[OrderItem, ...]
    order_date: str
    total_cost: Decimal
    total_collected: Decimal
    status: OrderStatus = OrderStatus.COMPLETED

    @property
    def subtotal(self) -> Decimal:
        return sum((it.total_price for it in self.items), Decimal("0.00"))


@dataclass(frozen=True)
class InstallmentOrder:
    order_type: ClassVar[OrderType] = OrderType.INSTALLMENT

    order_id: Optional[str]
    customer_id: int
    items: tuple[OrderItem, ...]
    order_date: str
    total_cost: Decimal
    interest_rate: Decimal
    downpayment: Decimal
    daily_payment: Decimal
    total_collected: Decimal
    payments: tuple[Payment, ...] = field(default_factory=tuple)
    status: OrderStatus = OrderStatus.ACTIVE

    @property
    def subtotal(self) -> Decimal:
        return sum((it.total_price for it in self.items), Decimal("0.00"))

    @property
    def remaining_after_downpayment(self) -> Decimal:
        return self.total_cost - self.downpayment

    def payment_for(self, day: int) -> Payment | None:
        for p in self.payments:
            if p.day == day:
                return p
        return None


Order = Union[CashOrder, InstallmentOrder]
