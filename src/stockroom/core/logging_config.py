import logging
import sys
from typing import Iterable, Optional


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger("stockroom")


def setup_logging(
    level: int = logging.INFO,
    allowed_namespaces: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """
    Attaches a stdout handler to the ``stockroom`` logger.

    Calling it more than once does not stack handlers. When
    ``allowed_namespaces`` is given, only records from loggers under those
    prefixes (e.g. ``stockroom.features.reports``) reach the console.
    """
    app_logger.setLevel(level)
    for handler in list(app_logger.handlers):
        if getattr(handler, "_stockroom_console", False):
            app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler._stockroom_console = True
    if allowed_namespaces:
        console_handler.addFilter(NamespaceFilter(list(allowed_namespaces)))
    app_logger.addHandler(console_handler)

    return app_logger

# Note: modules use logging.getLogger(__name__), which yields loggers such as
# "stockroom.features.reports.service". They inherit levels and handlers from
# "stockroom" unless configured individually.
