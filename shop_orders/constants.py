# shop_orders/constants.py
APP_NAME = "Shop Orders"

DATA_DIR = "data"
DB_FILE_NAME = "shop_orders.db"
DB_ENV_VAR = "SHOP_ORDERS_DB"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# Installment terms (fixed, not configurable per order)
SCHEDULE_DAYS = 50
DOWNPAYMENT_RATE = "0.02"

ORDER_TYPES = ("cash", "installment")
ORDER_STATUSES = ("active", "completed", "cancelled")

PAYMENT_METHODS = ("Cash", "Bank Transfer", "Credit Card", "Debit Card")
DEFAULT_PAYMENT_METHOD = "Cash"

ITEM_CODE_PREFIX = "PRD"
ORDER_ID_PREFIX = "ORD"

LOW_STOCK_THRESHOLD = 10

LOG_LEVEL_ENV_VAR = "SHOP_ORDERS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
