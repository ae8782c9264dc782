import logging
import sys


def setup_logging(level="WARNING") -> logging.Logger:
    """
    Send Tree_Hash log records to stderr, keeping stdout for the hash.
    """
    logger = logging.getLogger("Tree_Hash")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers.clear()

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)

    logger.addHandler(ch)
    return logger
