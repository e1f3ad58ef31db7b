# shop_orders/database/repositories/products_repo.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import re
import sqlite3
from contextlib import contextmanager

from ...constants import ITEM_CODE_PREFIX
from ...utils.helpers import money_str, round2
from ...utils.validators import is_non_negative_number, non_empty


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


@dataclass
class Product:
    product_id: int | None
    item_code: str
    item_name: str
    price: Decimal
    stock: int | None
    archived: bool = False


_COLS = (
    "product_id, item_code, item_name, price, stock, "
    "(deleted_at IS NOT NULL) AS archived"
)


class ProductsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # Use Row for named access; we normalize to dataclasses.
        self.conn.row_factory = sqlite3.Row

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def _immediate_tx(self):
        """
        Start an IMMEDIATE transaction (write lock once first write happens),
        commit on success, rollback on error.
        """
        cur = self.conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()

    # ---------------------------- Validation ----------------------------

    @staticmethod
    def _validate(item_name: str, price, stock: Optional[int]) -> None:
        if not non_empty(item_name):
            raise DomainError("Item name cannot be empty.")
        if price is None or not is_non_negative_number(price):
            raise DomainError("Price must be a number greater than or equal to 0.")
        if stock is not None and (isinstance(stock, bool) or not isinstance(stock, int) or stock < 0):
            raise DomainError("Stock must be a whole number greater than or equal to 0.")

    @staticmethod
    def _to_product(r: sqlite3.Row) -> Product:
        return Product(
            product_id=r["product_id"],
            item_code=r["item_code"],
            item_name=r["item_name"],
            price=round2(r["price"]),
            stock=r["stock"],
            archived=bool(r["archived"]),
        )

    # ---------------------------- Products ----------------------------

    def list_products(self, active_only: bool = True) -> list[Product]:
        sql = f"SELECT {_COLS} FROM products "
        if active_only:
            sql += "WHERE deleted_at IS NULL "
        sql += "ORDER BY product_id DESC"
        return [self._to_product(r) for r in self.conn.execute(sql).fetchall()]

    def search(self, term: str, active_only: bool = True) -> list[Product]:
        """Match on item name or item code."""
        pattern = f"%{term.strip()}%"
        sql = f"SELECT {_COLS} FROM products WHERE (item_name LIKE ? OR item_code LIKE ?) "
        if active_only:
            sql += "AND deleted_at IS NULL "
        sql += "ORDER BY product_id DESC"
        return [self._to_product(r) for r in self.conn.execute(sql, (pattern, pattern)).fetchall()]

    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return self._to_product(r) if r else None

    def next_item_code(self) -> str:
        """
        PRD + (highest numeric part of any existing code, archived included) + 1,
        zero-padded to 4 digits.
        """
        highest = 0
        for (code,) in self.conn.execute("SELECT item_code FROM products").fetchall():
            digits = re.sub(r"\D", "", code or "")
            if digits:
                highest = max(highest, int(digits))
        return f"{ITEM_CODE_PREFIX}{highest + 1:04d}"

    def create(self, item_name: str, price, stock: Optional[int] = None) -> int:
        self._validate(item_name, price, stock)
        with self._immediate_tx():
            cur = self.conn.execute(
                "INSERT INTO products(item_code, item_name, price, stock) VALUES (?, ?, ?, ?)",
                (self.next_item_code(), item_name.strip(), money_str(price), stock),
            )
            return int(cur.lastrowid)

    def update(self, product_id: int, item_name: str, price, stock: Optional[int]) -> None:
        """
        Edits the live product only; order items keep their own name/price snapshot.
        """
        self._validate(item_name, price, stock)
        with self._immediate_tx():
            self.conn.execute(
                "UPDATE products "
                "SET item_name=?, price=?, stock=?, updated_at=CURRENT_TIMESTAMP "
                "WHERE product_id=?",
                (item_name.strip(), money_str(price), stock, product_id),
            )

    def archive(self, product_id: int) -> None:
        """Soft delete via deleted_at; referenced products are never hard-deleted."""
        with self._immediate_tx():
            self.conn.execute(
                "UPDATE products SET deleted_at=CURRENT_TIMESTAMP, updated_at=CURRENT_TIMESTAMP "
                "WHERE product_id=? AND deleted_at IS NULL",
                (product_id,),
            )

    def restore(self, product_id: int) -> None:
        with self._immediate_tx():
            self.conn.execute(
                "UPDATE products SET deleted_at=NULL, updated_at=CURRENT_TIMESTAMP WHERE product_id=?",
                (product_id,),
            )
