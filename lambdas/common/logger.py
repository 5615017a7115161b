"""
METEO Notify Logger
===================
One named logger per module, e.g. ``log = get_logger(__file__)``.
"""

import logging
import os

from lambdas.common.constants import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(file_name: str, level: str = None) -> logging.Logger:
    """
    Get a logger named after the calling module's file.

    The Lambda runtime installs its own root handler; locally we fall back
    to a basic stream handler so messages still show up.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(format=LOG_FORMAT)

    name = os.path.splitext(os.path.basename(file_name))[0]
    logger = logging.getLogger(f"meteo_notify.{name}")
    logger.setLevel(level or LOG_LEVEL)
    return logger
