from pathlib import Path
import sqlite3
import sys

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CATALOG ======================== */

/* -------- products -------- */
CREATE TABLE IF NOT EXISTS products (
    product_id  INTEGER PRIMARY KEY AUTOINCREMENT,
    item_code   TEXT UNIQUE NOT NULL,
    item_name   TEXT NOT NULL,
    price       NUMERIC NOT NULL CHECK (CAST(price AS REAL) >= 0),
    stock       INTEGER CHECK (stock IS NULL OR stock >= 0),
    created_at  TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at  TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    deleted_at  TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_products_deleted_at ON products(deleted_at);

/* -------- customers -------- */
CREATE TABLE IF NOT EXISTS customers (
    customer_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    full_name      TEXT NOT NULL,
    address        TEXT NOT NULL DEFAULT '',
    contact_number TEXT NOT NULL,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    deleted_at     TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_customers_deleted_at ON customers(deleted_at);

/* ======================== ORDERS ======================== */

/* -------- orders: cash rows never carry installment fields -------- */
CREATE TABLE IF NOT EXISTS orders (
    order_id        TEXT PRIMARY KEY,
    customer_id     INTEGER NOT NULL,
    order_type      TEXT NOT NULL CHECK (order_type IN ('cash','installment')),
    order_date      DATE NOT NULL DEFAULT CURRENT_DATE,
    status          TEXT NOT NULL DEFAULT 'active'
                    CHECK (status IN ('active','completed','cancelled')),
    total_cost      NUMERIC NOT NULL CHECK (CAST(total_cost AS REAL) >= 0),
    interest_rate   NUMERIC CHECK (interest_rate IS NULL OR CAST(interest_rate AS REAL) >= 0),
    downpayment     NUMERIC CHECK (downpayment IS NULL OR CAST(downpayment AS REAL) >= 0),
    daily_payment   NUMERIC CHECK (daily_payment IS NULL OR CAST(daily_payment AS REAL) >= 0),
    total_collected NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(total_collected AS REAL) >= 0),
    created_at      TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at      TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (
        (order_type = 'cash'
            AND interest_rate IS NULL AND downpayment IS NULL AND daily_payment IS NULL)
        OR
        (order_type = 'installment'
            AND interest_rate IS NOT NULL AND downpayment IS NOT NULL AND daily_payment IS NOT NULL)
    ),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders(customer_id);
CREATE INDEX IF NOT EXISTS idx_orders_type_status ON orders(order_type, status);
CREATE INDEX IF NOT EXISTS idx_orders_date ON orders(order_date);

/* -------- order items: product name/price are snapshots -------- */
CREATE TABLE IF NOT EXISTS order_items (
    item_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id     TEXT NOT NULL,
    product_id   INTEGER NOT NULL,
    product_name TEXT NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity >= 1),
    unit_price   NUMERIC NOT NULL CHECK (CAST(unit_price AS REAL) >= 0),
    total_price  NUMERIC NOT NULL CHECK (CAST(total_price AS REAL) >= 0),
    created_at   TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (order_id)   REFERENCES orders(order_id) ON DELETE RESTRICT,
    FOREIGN KEY (product_id) REFERENCES products(product_id) ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id);

/* -------- payments: one row per schedule day -------- */
CREATE TABLE IF NOT EXISTS payments (
    payment_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id       TEXT NOT NULL,
    day            INTEGER NOT NULL CHECK (day BETWEEN 1 AND 50),
    amount         NUMERIC NOT NULL CHECK (CAST(amount AS REAL) >= 0),
    paid           INTEGER NOT NULL DEFAULT 0 CHECK (paid IN (0,1)),
    date_paid      DATE,
    payment_method TEXT,
    notes          TEXT,
    created_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (order_id, day),
    CHECK (paid = 1 OR (date_paid IS NULL AND payment_method IS NULL AND notes IS NULL)),
    FOREIGN KEY (order_id) REFERENCES orders(order_id) ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS idx_payments_order ON payments(order_id);

/* ======================== TRIGGERS ======================== */

/* payments only attach to installment orders */
DROP TRIGGER IF EXISTS trg_payments_installment_only;
CREATE TRIGGER trg_payments_installment_only
BEFORE INSERT ON payments
FOR EACH ROW
BEGIN
  SELECT CASE
    WHEN (SELECT order_type FROM orders WHERE order_id = NEW.order_id) <> 'installment'
    THEN RAISE(ABORT, 'Payments are only allowed on installment orders')
  END;
END;

/* paid is one-way; amount and day are fixed at creation */
DROP TRIGGER IF EXISTS trg_payments_no_unpay;
CREATE TRIGGER trg_payments_no_unpay
BEFORE UPDATE ON payments
FOR EACH ROW
WHEN OLD.paid = 1
  OR NEW.amount IS NOT OLD.amount
  OR NEW.day <> OLD.day
  OR NEW.order_id <> OLD.order_id
BEGIN
  SELECT RAISE(ABORT, 'Payment rows are append-only once paid');
END;

/* collections never decrease; totals never change after creation */
DROP TRIGGER IF EXISTS trg_orders_collected_monotonic;
CREATE TRIGGER trg_orders_collected_monotonic
BEFORE UPDATE ON orders
FOR EACH ROW
WHEN CAST(NEW.total_collected AS REAL) < CAST(OLD.total_collected AS REAL) - 1e-9
  OR NEW.total_cost IS NOT OLD.total_cost
  OR NEW.order_type <> OLD.order_type
BEGIN
  SELECT RAISE(ABORT, 'Order totals are immutable and collections cannot decrease');
END;

/* terminal statuses stay terminal */
DROP TRIGGER IF EXISTS trg_orders_status_terminal;
CREATE TRIGGER trg_orders_status_terminal
BEFORE UPDATE OF status ON orders
FOR EACH ROW
WHEN OLD.status = 'cancelled' AND NEW.status <> 'cancelled'
BEGIN
  SELECT RAISE(ABORT, 'Cancelled orders cannot be reopened');
END;
"""


def init_schema(db_path: Path | str = "shop_orders.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        conn.executescript(SQL)
        conn.commit()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "shop_orders.db"
    init_schema(target)
    print(f"✓ DB applied to {target}")
