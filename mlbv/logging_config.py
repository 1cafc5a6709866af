from __future__ import annotations

import logging

DEFAULT_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for(verbose: int, configured: str = "WARNING") -> int:
    base = getattr(logging, configured.upper(), logging.WARNING)
    if verbose <= 0:
        return base
    return min(base, VERBOSITY_LEVELS[min(verbose, len(VERBOSITY_LEVELS) - 1)])


def configure_logging(verbose: int = 0, configured: str = "WARNING") -> None:
    """Configure process-wide logging once at startup; -v/-vv lower the threshold."""
    logging.basicConfig(level=level_for(verbose, configured), format=DEFAULT_LOG_FORMAT, force=True)
    # urllib3 logs every connection at DEBUG
    if verbose < 3:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
