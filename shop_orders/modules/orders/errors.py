# shop_orders/modules/orders/errors.py
"""
Typed errors for pricing, schedule and order-state rules.

Business-rule failures derive from OrderError so the caller can show them
as fixable by the user. PersistenceError is deliberately outside that
hierarchy: it wraps storage failures (sqlite connectivity, constraint
violations) which are transient or environmental, never a rule decision.
"""


class OrderError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


class InvalidCartError(OrderError):
    """Empty cart, quantity below 1, or negative unit price."""


class InvalidRateError(OrderError):
    """Missing or negative installment interest rate."""


class PaymentNotFoundError(OrderError):
    """Day outside 1..50, or the order has no schedule (cash order)."""


class AlreadyPaidError(OrderError):
    """The schedule day has already been marked paid."""


class OrderClosedError(OrderError):
    """The order is completed or cancelled and accepts no further changes."""


class OrderNotFoundError(OrderError):
    pass


class PersistenceError(Exception):
    """Storage failure. Not a business-rule error; callers may retry."""
    pass
