"""
shop_orders: products, customers and cash / 50-day installment orders
over a local SQLite database.
"""

__version__ = "0.1.0"
