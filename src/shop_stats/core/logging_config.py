import logging
import sys

from .config import LOG_NAMESPACES


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True  # No namespaces configured, let everything through
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def configure_logging(allowed_namespaces=None) -> logging.Logger:
    """
    Attach a stdout handler to the ``shop_stats`` logger.

    Modules log through ``logging.getLogger(__name__)`` so their records
    propagate to this logger. Calling this twice does not add a second handler.
    """
    app_logger = logging.getLogger("shop_stats")
    app_logger.setLevel(logging.INFO)

    if app_logger.handlers:
        return app_logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)

    namespaces = LOG_NAMESPACES if allowed_namespaces is None else allowed_namespaces
    if namespaces:
        console_handler.addFilter(NamespaceFilter(namespaces))

    app_logger.addHandler(console_handler)

    # Report computations log their intermediate figures at DEBUG
    logging.getLogger("shop_stats.features.statistics").setLevel(logging.DEBUG)

    # To see the SQL emitted by the statistics store:
    # logging.getLogger("tortoise.db_client").setLevel(logging.DEBUG)
    return app_logger
