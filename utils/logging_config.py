"""Root logger configuration for the marketplace service."""

import logging

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logger: logging.Logger | None = None) -> None:
    """
    Configure a logger (the root logger by default) with a console handler.

    Does nothing if the logger already has handlers, so repeated app
    construction (tests, reloads) never duplicates output.

    Args:
        level: Logging level name, case insensitive. Unknown names fall back to INFO.
        logger: Logger to configure, root when omitted
    """
    target = logger if logger is not None else logging.getLogger()
    if target.handlers:
        return

    target.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
    target.addHandler(handler)
