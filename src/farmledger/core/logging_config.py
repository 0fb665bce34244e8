import logging
import sys
from typing import Optional

from .config import LOG_LEVEL, LOG_NAMESPACES


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

app_logger = logging.getLogger("farmledger")


def configure_logging(
    level: Optional[str] = None, namespaces: Optional[list[str]] = None
) -> logging.Logger:
    """
    Attaches a stdout handler to the "farmledger" logger.

    Modules use logging.getLogger(__name__), so every logger below
    "farmledger.features.*" inherits the level set here unless it is
    overridden for its own namespace. Calling this more than once replaces
    the handler instead of stacking a second one.
    """
    level_name = (level or LOG_LEVEL).upper()
    allowed = LOG_NAMESPACES if namespaces is None else namespaces

    app_logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in list(app_logger.handlers):
        if getattr(handler, "_farmledger_handler", False):
            app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler._farmledger_handler = True
    if allowed:
        console_handler.addFilter(NamespaceFilter(allowed))
    app_logger.addHandler(console_handler)
    return app_logger


# Example of a per-namespace override:
# logging.getLogger("farmledger.features.reports").setLevel(logging.DEBUG)
#
# SQL logging from Tortoise can be enabled the same way:
# logging.getLogger("tortoise.db_client").setLevel(logging.DEBUG)
