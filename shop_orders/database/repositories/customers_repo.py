from __future__ import annotations
from dataclasses import dataclass
import sqlite3


# Domain-level error the controller can surface directly (e.g., toast/snackbar)
class DomainError(Exception):
    pass


@dataclass
class Customer:
    customer_id: int | None
    full_name: str
    address: str
    contact_number: str
    archived: bool = False


_COLS = (
    "customer_id, full_name, address, contact_number, "
    "(deleted_at IS NOT NULL) AS archived"
)


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        return s.strip()

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    @staticmethod
    def _to_customer(r: sqlite3.Row) -> Customer:
        return Customer(
            customer_id=r["customer_id"],
            full_name=r["full_name"],
            address=r["address"],
            contact_number=r["contact_number"],
            archived=bool(r["archived"]),
        )

    # ---- Queries ----------------------------------------------------------

    def list_customers(self, active_only: bool = True) -> list[Customer]:
        """
        Returns customers. By default, archived rows (deleted_at set) are hidden.
        """
        sql = f"SELECT {_COLS} FROM customers "
        if active_only:
            sql += "WHERE deleted_at IS NULL "
        sql += "ORDER BY customer_id DESC"
        return [self._to_customer(r) for r in self.conn.execute(sql).fetchall()]

    def search(self, term: str, active_only: bool = True) -> list[Customer]:
        """
        Case-insensitive LIKE match over name, contact number and address.
        """
        pattern = f"%{term.strip()}%"
        sql = (
            f"SELECT {_COLS} FROM customers "
            "WHERE (full_name LIKE ? OR contact_number LIKE ? OR address LIKE ?) "
        )
        if active_only:
            sql += "AND deleted_at IS NULL "
        sql += "ORDER BY customer_id DESC"
        rows = self.conn.execute(sql, (pattern, pattern, pattern)).fetchall()
        return [self._to_customer(r) for r in rows]

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            f"SELECT {_COLS} FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return self._to_customer(r) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(self, full_name: str, contact_number: str, address: str | None = "") -> int:
        self._ensure_non_empty(full_name, "Full name")
        self._ensure_non_empty(contact_number, "Contact number")

        cur = self.conn.execute(
            "INSERT INTO customers(full_name, contact_number, address) VALUES (?,?,?)",
            (
                self._normalize_text(full_name),
                self._normalize_text(contact_number),
                self._normalize_text(address) or "",
            ),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def update(self, customer_id: int, full_name: str, contact_number: str, address: str | None) -> None:
        self._ensure_non_empty(full_name, "Full name")
        self._ensure_non_empty(contact_number, "Contact number")

        self.conn.execute(
            "UPDATE customers SET full_name=?, contact_number=?, address=?, "
            "updated_at=CURRENT_TIMESTAMP WHERE customer_id=?",
            (
                self._normalize_text(full_name),
                self._normalize_text(contact_number),
                self._normalize_text(address) or "",
                customer_id,
            ),
        )
        self.conn.commit()

    def archive(self, customer_id: int) -> None:
        """Soft delete. Existing orders keep referencing the row."""
        self.conn.execute(
            "UPDATE customers SET deleted_at=CURRENT_TIMESTAMP, updated_at=CURRENT_TIMESTAMP "
            "WHERE customer_id=? AND deleted_at IS NULL",
            (customer_id,),
        )
        self.conn.commit()

    def restore(self, customer_id: int) -> None:
        self.conn.execute(
            "UPDATE customers SET deleted_at=NULL, updated_at=CURRENT_TIMESTAMP WHERE customer_id=?",
            (customer_id,),
        )
        self.conn.commit()
