# shop_orders/modules/orders/bus.py
"""
Qt bridge for order change events.

Register `OrderEventBus.publish` as an OrderService listener; views connect
to the signals to refresh after each committed change.
"""
from PySide6.QtCore import QObject, Signal

from .events import EventKind, OrderEvent


class OrderEventBus(QObject):
    orderCreated = Signal(str)              # order_id
    paymentRecorded = Signal(str, int)      # order_id, day
    orderStatusChanged = Signal(str, str)   # order_id, new status

    def publish(self, event: OrderEvent) -> None:
        if event.kind is EventKind.ORDER_CREATED:
            self.orderCreated.emit(event.order_id)
        elif event.kind is EventKind.PAYMENT_RECORDED:
            self.paymentRecorded.emit(event.order_id, int(event.day))
        elif event.kind is EventKind.STATUS_CHANGED:
            self.orderStatusChanged.emit(event.order_id, event.order.status.value)
