# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from shop_orders.database.repositories import (
        CustomersRepo, Customer, CustomersDomainError,
        ProductsRepo, Product, ProductsDomainError,
        OrdersRepo, new_order_id,
        ReportingRepo,
    )
"""

# ---------------- Customers ----------------
from .customers_repo import (
    CustomersRepo,
    Customer,
    DomainError as CustomersDomainError,
)

# ---------------- Products -----------------
from .products_repo import (
    ProductsRepo,
    Product,
    DomainError as ProductsDomainError,
)

# ----------------- Orders ------------------
from .orders_repo import OrdersRepo, new_order_id

# ---------------- Reporting ----------------
from .reporting_repo import ReportingRepo

__all__ = [
    "CustomersRepo",
    "Customer",
    "CustomersDomainError",
    "ProductsRepo",
    "Product",
    "ProductsDomainError",
    "OrdersRepo",
    "new_order_id",
    "ReportingRepo",
]
