# supplier_ledger/utils/loggers.py
import logging

from ..config import LOG_LEVEL

ROOT_LOGGER = "supplier_ledger"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Logger under the package namespace. The stream handler is attached to
    the package root once, so module loggers (database, sync) share it.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
    return logging.getLogger(name)
