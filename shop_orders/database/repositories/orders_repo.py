from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal
from typing import Iterator, Optional

from ...constants import ORDER_ID_PREFIX
from ...modules.orders.domain import (
    CashOrder,
    InstallmentOrder,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    Payment,
)
from ...modules.orders.errors import (
    AlreadyPaidError,
    OrderClosedError,
    PaymentNotFoundError,
    PersistenceError,
)
from ...modules.orders.schedule import SETTLE_TOLERANCE
from ...utils.helpers import money_str, round2, round_rate, today_str
from ...utils.loggers import get_logger

_log = get_logger(__name__)


def new_order_id(conn: sqlite3.Connection, date_str: str) -> str:
    d = date_str.replace("-", "")
    prefix = f"{ORDER_ID_PREFIX}{d}-"
    # numeric max: text order would put -9999 after -10000
    row = conn.execute(
        "SELECT MAX(CAST(substr(order_id, ?) AS INTEGER)) AS m FROM orders WHERE order_id LIKE ?",
        (len(prefix) + 1, prefix + "%"),
    ).fetchone()
    last = int(row["m"]) if row and row["m"] is not None else 0
    return f"{prefix}{last+1:04d}"


class OrdersRepo:
    """
    Orders, order items and installment payment rows.

    Key behavior:
      - An order, its items and (installment only) its 50 payment rows are
        written in one IMMEDIATE transaction; any failure rolls all of it back.
      - A payment row is only ever updated from paid=0 to paid=1, together with
        the order's total_collected/status, in one transaction. The payment
        UPDATE is conditional on paid=0 so a concurrent second writer for the
        same day affects no rows and gets AlreadyPaidError. total_collected is
        recomputed from the paid rows in that same transaction.
      - interest_rate is stored at a fixed scale (4 places) so it reloads exactly.
      - sqlite3.Error is re-raised as PersistenceError (chained).
    """

    ORDER_FIELDS: frozenset[str] = frozenset({"status", "total_collected"})
    PAYMENT_FIELDS: frozenset[str] = frozenset({"date_paid", "payment_method", "notes"})

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self._tx_depth = 0

    # ---------------------------------------------------------------------
    # TX helper
    # ---------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Start an IMMEDIATE transaction (write lock up front), commit on success,
        rollback on error. Nested use joins the outer transaction.
        """
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield self.conn
            finally:
                self._tx_depth -= 1
            return

        try:
            self.conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not start transaction: {e}") from e
        self._tx_depth = 1
        try:
            yield self.conn
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(str(e)) from e
        except BaseException:
            self.conn.rollback()
            raise
        finally:
            self._tx_depth = 0

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get_order_with_payments_by_id(self, order_id: str) -> Order | None:
        try:
            row = self.conn.execute(
                "SELECT * FROM orders WHERE order_id=?", (order_id,)
            ).fetchone()
            if row is None:
                return None
            items = self._items_for(order_id)
            payments = self.list_payments_by_order(order_id) if row["order_type"] == "installment" else []
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e
        return self._order_from_row(row, items, payments)

    def list_payments_by_order(self, order_id: str) -> list[Payment]:
        rows = self._execute(
            """
            SELECT payment_id, day, amount, paid, date_paid, payment_method, notes
              FROM payments
             WHERE order_id = ?
             ORDER BY day ASC
            """,
            (order_id,),
        ).fetchall()
        return [
            Payment(
                day=int(r["day"]),
                amount=round2(r["amount"]),
                paid=bool(r["paid"]),
                date_paid=r["date_paid"],
                payment_method=r["payment_method"],
                notes=r["notes"],
                payment_id=int(r["payment_id"]),
            )
            for r in rows
        ]

    def list_orders(
        self,
        order_type: str | OrderType | None = None,
        status: str | OrderStatus | None = None,
        *,
        customer_id: Optional[int] = None,
    ) -> list[Order]:
        """
        Orders newest first, with items and (installment) payments loaded.
        """
        where, params = [], []
        if order_type is not None:
            where.append("order_type = ?")
            params.append(OrderType(order_type).value)
        if status is not None:
            where.append("status = ?")
            params.append(OrderStatus(status).value)
        if customer_id is not None:
            where.append("customer_id = ?")
            params.append(customer_id)

        sql = "SELECT * FROM orders"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY DATE(order_date) DESC, order_id DESC"

        out: list[Order] = []
        for row in self._execute(sql, params).fetchall():
            oid = row["order_id"]
            payments = self.list_payments_by_order(oid) if row["order_type"] == "installment" else []
            out.append(self._order_from_row(row, self._items_for(oid), payments))
        return out

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def insert_order_with_items_and_payments(self, order: Order) -> Order:
        """
        Persist a new order atomically. If order.order_id is None an id of the
        form ORDyyyymmdd-NNNN is allocated inside the same transaction.
        Returns the order with ids filled in.
        """
        with self.transaction() as con:
            oid = order.order_id or new_order_id(con, order.order_date)
            if order.order_type is OrderType.INSTALLMENT:
                installment = (
                    str(round_rate(order.interest_rate)),
                    money_str(order.downpayment),
                    money_str(order.daily_payment),
                )
            else:
                installment = (None, None, None)

            con.execute(
                """
                INSERT INTO orders (
                    order_id, customer_id, order_type, order_date, status,
                    total_cost, interest_rate, downpayment, daily_payment, total_collected
                ) VALUES (?,?,?,?,?,?,?,?,?,?)
                """,
                (
                    oid,
                    order.customer_id,
                    order.order_type.value,
                    order.order_date,
                    order.status.value,
                    money_str(order.total_cost),
                    *installment,
                    money_str(order.total_collected),
                ),
            )

            items = tuple(self._insert_item(con, oid, it) for it in order.items)

            if order.order_type is not OrderType.INSTALLMENT:
                return replace(order, order_id=oid, items=items)

            payments = tuple(self._insert_payment(con, oid, p) for p in order.payments)
            return replace(order, order_id=oid, items=items, payments=payments)

    def update_payment_and_order(
        self,
        payment_id: int,
        payment_fields: dict,
        order_id: str,
        order_fields: dict,
    ) -> tuple[Decimal, OrderStatus]:
        """
        Mark one payment row paid and update the order header in one transaction.

        payment_fields: date_paid, payment_method, notes (date_paid defaults to today)
        order_fields:   total_collected, status

        total_collected is recomputed from the downpayment and the paid rows
        inside the transaction, so a caller holding an older copy of the order
        cannot drop another writer's payment. An active order whose rows are
        settled is moved to completed. Returns the stored (total_collected, status).

        Raises AlreadyPaidError if the row is already paid (including when a
        concurrent writer got there first), PaymentNotFoundError if the row does
        not belong to the order, OrderClosedError if the order is no longer active.
        """
        unknown = (set(payment_fields) - self.PAYMENT_FIELDS) | (set(order_fields) - self.ORDER_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported fields: {', '.join(sorted(unknown))}")

        with self.transaction() as con:
            cur = con.execute(
                """
                UPDATE payments
                   SET paid = 1,
                       date_paid      = :date_paid,
                       payment_method = :payment_method,
                       notes          = :notes,
                       updated_at     = CURRENT_TIMESTAMP
                 WHERE payment_id = :payment_id
                   AND order_id   = :order_id
                   AND paid = 0
                """,
                {
                    "date_paid": payment_fields.get("date_paid") or today_str(),
                    "payment_method": payment_fields.get("payment_method"),
                    "notes": payment_fields.get("notes"),
                    "payment_id": payment_id,
                    "order_id": order_id,
                },
            )
            if cur.rowcount == 0:
                row = con.execute(
                    "SELECT paid FROM payments WHERE payment_id=? AND order_id=?",
                    (payment_id, order_id),
                ).fetchone()
                if row is None:
                    raise PaymentNotFoundError(f"Payment {payment_id} not found on order {order_id}.")
                raise AlreadyPaidError(f"Payment {payment_id} of order {order_id} is already paid.")

            header = con.execute(
                "SELECT status, total_cost, downpayment FROM orders WHERE order_id=?",
                (order_id,),
            ).fetchone()
            if header is None or header["status"] != OrderStatus.ACTIVE.value:
                raise OrderClosedError(f"Order {order_id} is not active.")

            # total_collected always comes from the committed rows, never the caller's snapshot
            rows = con.execute(
                "SELECT amount, paid FROM payments WHERE order_id=?", (order_id,)
            ).fetchall()
            collected = round2(header["downpayment"]) + sum(
                (round2(r["amount"]) for r in rows if r["paid"]), Decimal("0.00")
            )
            total_cost = round2(header["total_cost"])
            status = OrderStatus(order_fields.get("status", header["status"]))
            settled = all(r["paid"] for r in rows) or (
                total_cost > 0 and collected >= total_cost - SETTLE_TOLERANCE
            )
            if status is OrderStatus.ACTIVE and settled:
                status = OrderStatus.COMPLETED

            given = order_fields.get("total_collected")
            if given is not None and round2(given) != collected:
                _log.warning(
                    "Order %s: caller total_collected %s differs from stored rows; storing %s",
                    order_id, round2(given), collected,
                )

            cur = con.execute(
                """
                UPDATE orders
                   SET total_collected = ?, status = ?, updated_at = CURRENT_TIMESTAMP
                 WHERE order_id = ? AND status = 'active'
                """,
                (money_str(collected), status.value, order_id),
            )
            if cur.rowcount == 0:
                raise OrderClosedError(f"Order {order_id} is not active.")
            return collected, status

    def set_status(self, order_id: str, status: str | OrderStatus, *, expected: str | OrderStatus) -> None:
        """
        Conditional status change (compare-and-set on the current status).
        """
        with self.transaction() as con:
            cur = con.execute(
                "UPDATE orders SET status=?, updated_at=CURRENT_TIMESTAMP WHERE order_id=? AND status=?",
                (OrderStatus(status).value, order_id, OrderStatus(expected).value),
            )
            if cur.rowcount == 0:
                raise OrderClosedError(f"Order {order_id} changed state concurrently or does not exist.")

    # ---------------------------------------------------------------------
    # INTERNAL
    # ---------------------------------------------------------------------
    def _execute(self, sql: str, params=()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def _items_for(self, order_id: str) -> list[OrderItem]:
        rows = self._execute(
            """
            SELECT item_id, product_id, product_name, quantity, unit_price, total_price
              FROM order_items
             WHERE order_id = ?
             ORDER BY item_id
            """,
            (order_id,),
        ).fetchall()
        return [
            OrderItem(
                product_id=int(r["product_id"]),
                product_name=r["product_name"],
                quantity=int(r["quantity"]),
                unit_price=round2(r["unit_price"]),
                total_price=round2(r["total_price"]),
                item_id=int(r["item_id"]),
            )
            for r in rows
        ]

    @staticmethod
    def _insert_item(con: sqlite3.Connection, order_id: str, it: OrderItem) -> OrderItem:
        cur = con.execute(
            """
            INSERT INTO order_items (
                order_id, product_id, product_name, quantity, unit_price, total_price
            ) VALUES (?,?,?,?,?,?)
            """,
            (
                order_id,
                it.product_id,
                it.product_name,
                it.quantity,
                money_str(it.unit_price),
                money_str(it.total_price),
            ),
        )
        return replace(it, item_id=int(cur.lastrowid))

    @staticmethod
    def _insert_payment(con: sqlite3.Connection, order_id: str, p: Payment) -> Payment:
        cur = con.execute(
            """
            INSERT INTO payments (
                order_id, day, amount, paid, date_paid, payment_method, notes
            ) VALUES (?,?,?,?,?,?,?)
            """,
            (
                order_id,
                p.day,
                money_str(p.amount),
                1 if p.paid else 0,
                p.date_paid,
                p.payment_method,
                p.notes,
            ),
        )
        return replace(p, payment_id=int(cur.lastrowid))

    @staticmethod
    def _order_from_row(row: sqlite3.Row, items: list[OrderItem], payments: list[Payment]) -> Order:
        common = dict(
            order_id=row["order_id"],
            customer_id=int(row["customer_id"]),
            items=tuple(items),
            order_date=row["order_date"],
            total_cost=round2(row["total_cost"]),
            total_collected=round2(row["total_collected"]),
            status=OrderStatus(row["status"]),
        )
        if row["order_type"] == OrderType.CASH.value:
            return CashOrder(**common)
        return InstallmentOrder(
            interest_rate=round_rate(row["interest_rate"]),
            downpayment=round2(row["downpayment"]),
            daily_payment=round2(row["daily_payment"]),
            payments=tuple(payments),
            **common,
        )
