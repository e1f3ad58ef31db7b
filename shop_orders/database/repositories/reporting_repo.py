# shop_orders/database/repositories/reporting_repo.py
from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ...constants import LOW_STOCK_THRESHOLD
from ...utils.helpers import round2


@dataclass(frozen=True)
class InventorySummary:
    active_products: int
    total_value: Decimal
    low_stock_items: int


@dataclass(frozen=True)
class DashboardCounts:
    active_products: int
    active_customers: int
    total_orders: int
    cash_orders: int
    active_installments: int
    total_revenue: Decimal


class ReportingRepo:
    """
    Read-only queries for the dashboard and report tabs.

    Notes:
      • Archived products/customers (deleted_at set) are excluded from catalog figures.
      • Money sums are computed with CAST(... AS REAL) in SQL and rounded to 2 places.
      • Callers pass ISO 'YYYY-MM-DD' dates; order_date is stored in the same form.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ----------------------------------------------------------------------
    # ------------------------------ CATALOG --------------------------------
    # ----------------------------------------------------------------------

    def inventory_summary(self, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> InventorySummary:
        """
        total_value = Σ price × stock over active products (missing stock counts as 0).
        Low stock = stock present, above zero and below the threshold.
        """
        row = self.conn.execute(
            """
            SELECT
                COUNT(*) AS n,
                COALESCE(SUM(CAST(price AS REAL) * COALESCE(stock, 0)), 0.0) AS value,
                COALESCE(SUM(CASE WHEN stock > 0 AND stock < ? THEN 1 ELSE 0 END), 0) AS low
            FROM products
            WHERE deleted_at IS NULL
            """,
            (low_stock_threshold,),
        ).fetchone()
        return InventorySummary(
            active_products=int(row["n"]),
            total_value=round2(row["value"]),
            low_stock_items=int(row["low"]),
        )

    # ----------------------------------------------------------------------
    # ------------------------------ DASHBOARD ------------------------------
    # ----------------------------------------------------------------------

    def dashboard_counts(self) -> DashboardCounts:
        row = self.conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM products  WHERE deleted_at IS NULL) AS active_products,
                (SELECT COUNT(*) FROM customers WHERE deleted_at IS NULL) AS active_customers,
                (SELECT COUNT(*) FROM orders) AS total_orders,
                (SELECT COUNT(*) FROM orders WHERE order_type = 'cash') AS cash_orders,
                (SELECT COUNT(*) FROM orders
                  WHERE order_type = 'installment' AND status = 'active') AS active_installments,
                (SELECT COALESCE(SUM(CAST(total_cost AS REAL)), 0.0)
                   FROM orders WHERE status <> 'cancelled') AS total_revenue
            """
        ).fetchone()
        return DashboardCounts(
            active_products=int(row["active_products"]),
            active_customers=int(row["active_customers"]),
            total_orders=int(row["total_orders"]),
            cash_orders=int(row["cash_orders"]),
            active_installments=int(row["active_installments"]),
            total_revenue=round2(row["total_revenue"]),
        )

    def recent_orders(self, limit: int = 5) -> list[sqlite3.Row]:
        sql = """
        SELECT o.order_id, o.order_date, o.order_type, o.status,
               CAST(o.total_cost AS REAL) AS total_cost,
               c.full_name AS customer_name
        FROM orders o
        JOIN customers c ON c.customer_id = o.customer_id
        ORDER BY o.created_at DESC, o.order_id DESC
        LIMIT ?
        """
        return list(self.conn.execute(sql, (limit,)))

    def period_activity(self, days: int = 30, as_of: Optional[str] = None) -> dict:
        """
        Order / customer / product activity in the last `days` days versus the
        `days` before that. Each entry is {"current": n, "previous": n}.
        """
        end = date.fromisoformat(as_of) if as_of else date.today()
        start_cur = (end - timedelta(days=days)).isoformat()
        start_prev = (end - timedelta(days=2 * days)).isoformat()

        def window(lo: str, hi: str, inclusive_hi: bool) -> sqlite3.Row:
            op = "<=" if inclusive_hi else "<"
            return self.conn.execute(
                f"""
                SELECT
                    COUNT(DISTINCT o.order_id)    AS orders,
                    COUNT(DISTINCT o.customer_id) AS customers,
                    COUNT(DISTINCT oi.product_id) AS products
                FROM orders o
                LEFT JOIN order_items oi ON oi.order_id = o.order_id
                WHERE o.order_date >= ? AND o.order_date {op} ?
                """,
                (lo, hi),
            ).fetchone()

        cur = window(start_cur, end.isoformat(), True)
        prev = window(start_prev, start_cur, False)
        return {
            key: {"current": int(cur[key]), "previous": int(prev[key])}
            for key in ("orders", "customers", "products")
        }

    # ----------------------------------------------------------------------
    # ---------------------------- INSTALLMENTS -----------------------------
    # ----------------------------------------------------------------------

    def installment_report_rows(self) -> list[sqlite3.Row]:
        """
        One row per installment order for the collections report:
        total cost, collected, remaining (= total_cost - total_collected) and paid days.
        """
        sql = """
        SELECT
            o.order_id, o.order_date, o.status,
            c.full_name AS customer_name,
            CAST(o.total_cost AS REAL)      AS total_cost,
            CAST(o.total_collected AS REAL) AS total_collected,
            CAST(o.total_cost AS REAL) - CAST(o.total_collected AS REAL) AS remaining,
            (SELECT COUNT(*) FROM payments p
              WHERE p.order_id = o.order_id AND p.paid = 1) AS paid_days
        FROM orders o
        JOIN customers c ON c.customer_id = o.customer_id
        WHERE o.order_type = 'installment'
        ORDER BY o.order_date DESC, o.order_id DESC
        """
        return list(self.conn.execute(sql))


def trend(current: int, previous: int) -> tuple[str, str]:
    """
    Percent change label and direction, e.g. ("+12.5%", "up").
    No previous activity reads as +100% when there is current activity.
    """
    if previous == 0:
        return ("+100%", "up") if current > 0 else ("0%", "up")
    pct = (current - previous) / previous * 100
    up = pct >= 0
    return (f"{'+' if up else ''}{pct:.1f}%", "up" if up else "down")
