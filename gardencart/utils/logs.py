import logging
import sys

from gardencart.config import settings


def get_logger(area: str) -> logging.Logger:
    """
    Return the named logger for one area of the library (api, cart, ...).

    A stdout handler tagged with the area is attached the first time the
    logger is requested; later calls reuse it.
    """
    log = logging.getLogger(f"gardencart.{area}")
    log.setLevel(settings.LOG_LEVEL.upper())
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(f"[{area.upper()}] %(message)s"))
        log.addHandler(h)
    return log
