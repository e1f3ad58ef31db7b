# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own temp-file SQLite DB built by init_schema
#   (a real file so WAL, triggers and second connections behave like production)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - pytest-qt owns QApplication (use qapp/qtbot fixtures) for model tests
# - `ids` seeds one customer and a few products and returns their ids
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import sqlite3
from decimal import Decimal
from pathlib import Path

import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from shop_orders.database.schema import init_schema
from shop_orders.database.repositories.customers_repo import CustomersRepo
from shop_orders.database.repositories.orders_repo import OrdersRepo
from shop_orders.database.repositories.products_repo import ProductsRepo
from shop_orders.modules.orders.domain import CartItem
from shop_orders.modules.orders.service import OrderService


def connect(db_path: Path) -> sqlite3.Connection:
    con = sqlite3.connect(db_path)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys=ON;")
    return con


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "shop_orders_test.db"
    init_schema(path)
    return path


@pytest.fixture()
def conn(db_path: Path):
    con = connect(db_path)
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def ids(conn: sqlite3.Connection) -> dict:
    """Common ids used throughout the order tests."""
    customers = CustomersRepo(conn)
    products = ProductsRepo(conn)
    return {
        "customer": customers.create("Maria Santos", "0917-555-0101", "12 Rizal St"),
        "customer_b": customers.create("Jose Cruz", "0917-555-0202", "4 Mabini Ave"),
        "prod_tv": products.create("LED TV 32in", Decimal("500.00"), 5),
        "prod_fan": products.create("Stand Fan", Decimal("250.00"), 20),
        "prod_iron": products.create("Flat Iron", Decimal("100.00"), None),
    }


@pytest.fixture()
def repo(conn: sqlite3.Connection) -> OrdersRepo:
    return OrdersRepo(conn)


@pytest.fixture()
def service(repo: OrdersRepo) -> OrderService:
    return OrderService(repo)


@pytest.fixture()
def tv_cart(ids: dict) -> tuple[CartItem, ...]:
    """Two TVs at 500.00 (subtotal 1000.00)."""
    return (CartItem(ids["prod_tv"], "LED TV 32in", 2, Decimal("500.00")),)


@pytest.fixture()
def fan_cart(ids: dict) -> tuple[CartItem, ...]:
    """One fan at 250.00."""
    return (CartItem(ids["prod_fan"], "Stand Fan", 1, Decimal("250.00")),)


@pytest.fixture()
def other_conn(db_path: Path):
    """A second, independent connection to the same DB file."""
    con = connect(db_path)
    try:
        yield con
    finally:
        con.close()
