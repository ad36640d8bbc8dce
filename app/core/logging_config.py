"""
Logging setup
One stream handler on the root logger; modules use logging.getLogger(__name__)
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once per process

    Calling it again only adjusts the level (no duplicate handlers).
    """
    root = logging.getLogger()
    root.setLevel(level)

    if any(getattr(h, "_nlq_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._nlq_handler = True
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
