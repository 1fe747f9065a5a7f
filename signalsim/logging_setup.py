import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = "signalsim.log") -> None:
    """Apply one log format to console output and, optionally, a rotating file.

    Call once at startup, before the first tick.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
        fh.setFormatter(fmt)
        root.addHandler(fh)
