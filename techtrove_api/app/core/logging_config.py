"""
Logging setup for the API process.

Records go to stderr and, optionally, to a file.  The MongoDB driver
emits a lot of DEBUG chatter (heartbeats, server selection), so its
loggers are capped at WARNING unless explicitly asked for.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Driver loggers that are too noisy below WARNING.
NOISY_LOGGERS = ("pymongo", "pymongo.serverSelection", "pymongo.topology")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"``; unknown names mean ``INFO``.
    logfile : Optional[str]
        Extra file destination.  Resolved against the working directory.
    quiet : Iterable[str]
        Logger names raised to WARNING.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured, e.g. by uvicorn or an earlier create_app().
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
