import importlib
import logging
import sqlite3

import pytest

from shop_orders.constants import SCHEMA_VERSION
from shop_orders.database import SchemaVersionError, get_connection
from shop_orders.database.versioning import get_current_version, set_current_version
from shop_orders.utils.loggers import get_logger


def test_get_connection_bootstraps_file(tmp_path):
    path = tmp_path / "nested" / "shop.db"
    conn = get_connection(path)
    try:
        assert path.exists()
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert conn.execute("PRAGMA journal_mode").fetchone()[0].lower() == "wal"
        assert get_current_version(conn) == SCHEMA_VERSION
        tables = {r["name"] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"products", "customers", "orders", "order_items", "payments"} <= tables
    finally:
        conn.close()


def test_get_connection_is_idempotent(tmp_path):
    path = tmp_path / "shop.db"
    first = get_connection(path)
    first.execute("INSERT INTO customers(full_name, contact_number) VALUES ('A', '1')")
    first.commit()
    first.close()

    again = get_connection(path)
    try:
        assert again.execute("SELECT COUNT(*) FROM customers").fetchone()[0] == 1
    finally:
        again.close()


def test_older_version_is_upgraded(tmp_path):
    path = tmp_path / "shop.db"
    get_connection(path).close()
    with sqlite3.connect(path) as raw:
        set_current_version(raw, "0.9.0")
    conn = get_connection(path)
    try:
        assert get_current_version(conn) == SCHEMA_VERSION
    finally:
        conn.close()


def test_newer_version_is_refused(tmp_path):
    path = tmp_path / "shop.db"
    get_connection(path).close()
    with sqlite3.connect(path) as raw:
        set_current_version(raw, "99.0.0")
    with pytest.raises(SchemaVersionError):
        get_connection(path)


def test_db_path_env_override(tmp_path, monkeypatch):
    import shop_orders.config as config

    target = tmp_path / "from_env.db"
    monkeypatch.setenv("SHOP_ORDERS_DB", str(target))
    try:
        assert importlib.reload(config).DB_PATH == target
    finally:
        monkeypatch.delenv("SHOP_ORDERS_DB")
        importlib.reload(config)


def test_package_loggers_share_one_handler():
    a = get_logger("shop_orders.modules.orders.service")
    b = get_logger("shop_orders.database.versioning")
    root = logging.getLogger("shop_orders")
    assert a.name.startswith("shop_orders.") and b.name.startswith("shop_orders.")
    assert len(root.handlers) == 1
    assert not a.handlers and not b.handlers
