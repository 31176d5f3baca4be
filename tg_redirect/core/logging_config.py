"""
Logging Configuration

Configures standard Python logging for the service. Modules log through
``logging.getLogger(__name__)``; the request middleware uses the
"tg_redirect" logger.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL statement logging is controlled by the engine's echo flag
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
