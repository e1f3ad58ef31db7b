# shop_orders/modules/orders/__init__.py
"""
Orders module: cash and 50-day installment orders.

Submodules:
- domain:   order/payment value types (CashOrder, InstallmentOrder, Payment, ...)
- errors:   typed business and persistence errors
- pricing:  cart, cash and installment price calculations
- schedule: payment schedule generation and mark-paid / cancel transitions
- metrics:  remaining balance, progress, paid days, portfolio summaries
- service:  OrderService (validates, persists via OrdersRepo, emits events)
- events:   OrderEvent and listener type
- model:    Qt table models for listing views (requires PySide6)
- bus:      OrderEventBus, Qt signals for order events (requires PySide6)

Nothing is imported here so that the repository layer can import the
domain types without pulling in the service or Qt.
"""
