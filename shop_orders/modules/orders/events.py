# shop_orders/modules/orders/events.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .domain import Order


class EventKind(str, Enum):
    ORDER_CREATED = "order_created"
    PAYMENT_RECORDED = "payment_recorded"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class OrderEvent:
    """Emitted after a successful commit; `order` is the committed state."""
    kind: EventKind
    order: Order
    day: Optional[int] = None

    @property
    def order_id(self) -> str:
        return self.order.order_id


OrderListener = Callable[[OrderEvent], None]
