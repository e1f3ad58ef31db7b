import logging
import os

from ..constants import LOG_FORMAT, LOG_LEVEL_ENV_VAR

ROOT_LOGGER = "shop_orders"


def get_logger(name=ROOT_LOGGER):
    """
    Loggers under `shop_orders` share one stream handler on the package
    logger; the level comes from SHOP_ORDERS_LOG_LEVEL (default INFO).
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        root.setLevel(os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper())
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(ch)
    return logging.getLogger(name)
