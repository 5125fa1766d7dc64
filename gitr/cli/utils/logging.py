import logging
import sys


logger = logging.getLogger("gitr")


def configure_logging(debug: bool):
    """
    Send gitr's log records to stdout, at debug level when asked for.
    """
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
