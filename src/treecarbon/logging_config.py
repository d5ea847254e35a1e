"""
Logging helpers for treecarbon.

The library only attaches a NullHandler; applications call setup_logging()
to see records on stderr.
"""
import logging
from typing import Optional, Union

__all__ = ['get_logger', 'setup_logging', 'log_species_resolution']

PACKAGE_LOGGER = 'treecarbon'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger in the treecarbon namespace.

    Args:
        name: Usually the calling module's __name__

    Returns:
        Logger instance
    """
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(level: Union[int, str] = logging.INFO,
                  fmt: Optional[str] = None) -> logging.Logger:
    """Configure a stream handler on the package logger.

    Calling it again replaces the previously installed stream handler
    instead of stacking a second one.

    Args:
        level: Logging level (name or number)
        fmt: Format string. Defaults to DEFAULT_FORMAT.

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, '_treecarbon_stream', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler._treecarbon_stream = True
    logger.addHandler(handler)
    return logger


def log_species_resolution(logger: logging.Logger, query: str, matched: int,
                           used_proxy: bool, used_default_density: bool) -> None:
    """Log how a free-text species name was resolved."""
    if used_proxy:
        logger.debug(f"No growth coefficients match '{query}'; using proxy species coefficients")
    else:
        logger.debug(f"'{query}' matched {matched} growth coefficient record(s)")
    if used_default_density:
        logger.debug(f"No density record matches '{query}'; using default wood density")
