from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from ...utils.helpers import fmt_money
from .domain import OrderType
from .metrics import paid_day_count, progress_percent, remaining_balance


class OrdersTableModel(QAbstractTableModel):
    def __init__(self, rows: list, customer_names: dict | None = None, order_type: str = "all"):
        super().__init__()
        self._rows = rows
        self._names = customer_names or {}
        self._order_type = order_type
        self._update_headers()

    def _update_headers(self):
        if self._order_type == OrderType.INSTALLMENT.value:
            self.HEADERS = ["ID", "Date", "Customer", "Total", "Collected", "Remaining", "Paid Days", "Progress", "Status"]
        else:
            self.HEADERS = ["ID", "Date", "Customer", "Type", "Total", "Status"]

    def set_order_type(self, order_type: str):
        """Switch between the all-orders and installments layouts."""
        if self._order_type != order_type:
            self.beginResetModel()
            self._order_type = order_type
            self._update_headers()
            self.endResetModel()

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        o = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            customer = self._names.get(o.customer_id, str(o.customer_id))
            if self._order_type == OrderType.INSTALLMENT.value:
                mapping = [
                    o.order_id,
                    o.order_date,
                    customer,
                    fmt_money(o.total_cost),
                    fmt_money(o.total_collected),
                    fmt_money(remaining_balance(o)),
                    f"{paid_day_count(o)}/{len(getattr(o, 'payments', ()))}",
                    f"{progress_percent(o):.0f}%",
                    o.status.value,
                ]
            else:
                mapping = [
                    o.order_id,
                    o.order_date,
                    customer,
                    o.order_type.value,
                    fmt_money(o.total_cost),
                    o.status.value,
                ]
            return mapping[c] if c < len(mapping) else None
        if role == Qt.TextAlignmentRole and self.HEADERS[c] in ("Total", "Collected", "Remaining"):
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list, customer_names: dict | None = None):
        self.beginResetModel()
        self._rows = rows
        if customer_names is not None:
            self._names = customer_names
        self.endResetModel()


class OrderItemsModel(QAbstractTableModel):
    HEADERS = ["#", "Product", "Qty", "Unit Price", "Line Total"]

    def __init__(self, rows: list):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, idx, role=Qt.DisplayRole):
        if not idx.isValid():
            return None
        r = self._rows[idx.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            m = [idx.row() + 1, r.product_name, str(r.quantity),
                 fmt_money(r.unit_price), fmt_money(r.total_price)]
            return m[idx.column()]
        return None

    def headerData(self, s, o, role=Qt.DisplayRole):
        return self.HEADERS[s] if o == Qt.Horizontal and role == Qt.DisplayRole else super().headerData(s, o, role)

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class PaymentScheduleModel(QAbstractTableModel):
    HEADERS = ["Day", "Amount", "Status", "Date Paid", "Method", "Notes"]

    def __init__(self, payments: list):
        super().__init__()
        self._rows = list(payments)

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, idx, role=Qt.DisplayRole):
        if not idx.isValid():
            return None
        p = self._rows[idx.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            m = [p.day, fmt_money(p.amount), "Paid" if p.paid else "Unpaid",
                 p.date_paid or "", p.payment_method or "", p.notes or ""]
            return m[idx.column()]
        if role == Qt.CheckStateRole and idx.column() == 2:
            return Qt.Checked if p.paid else Qt.Unchecked
        return None

    def headerData(self, s, o, role=Qt.DisplayRole):
        return self.HEADERS[s] if o == Qt.Horizontal and role == Qt.DisplayRole else super().headerData(s, o, role)

    def day_at(self, row: int) -> int:
        return self._rows[row].day

    def replace(self, payments: list):
        self.beginResetModel()
        self._rows = list(payments)
        self.endResetModel()
