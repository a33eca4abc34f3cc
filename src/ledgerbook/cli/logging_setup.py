"""Logging configuration for the command line."""

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(verbose: bool = False) -> logging.Handler:
    """Attach a stderr handler to the root logger.

    The level comes from LEDGERBOOK_LOG_LEVEL, defaulting to WARNING;
    --verbose lowers it to DEBUG. Output goes to stderr so command output on
    stdout stays clean.

    Returns:
        The installed handler, to be removed with teardown_logging
    """
    level_name = "DEBUG" if verbose else os.environ.get("LEDGERBOOK_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    # SQLAlchemy logs every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return handler


def teardown_logging(handler: logging.Handler) -> None:
    handler.flush()
    logging.getLogger().removeHandler(handler)
