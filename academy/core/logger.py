import logging
import sys

from academy.core.config import settings


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the ``academy`` logger; module loggers propagate to it.
    """
    level = (level or settings.LOG_LEVEL).upper()
    logger = logging.getLogger("academy")
    logger.setLevel(level)

    # Create console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    # Add handler to logger
    if not logger.handlers:
        logger.addHandler(handler)

    return logger


logger = setup_logging()
