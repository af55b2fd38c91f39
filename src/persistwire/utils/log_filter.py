"""Temporary log suppression helpers.

Used by the CLI to hide pipeline chatter while it renders its own summary.

Examples:
    Suppress INFO and below, show WARNING+::

        >>> with suppress_logger_level('driver', logging.WARNING):
        ...     driver.run()

    Quiet several loggers::

        >>> with quiet_logger(['driver', 'providers']):
        ...     driver.run()
"""

import logging
from contextlib import contextmanager


@contextmanager
def suppress_logger_level(logger_name: str | list[str], level: int):
    """Temporarily raise the level of one or more loggers.

    Yields:
        Dictionary mapping logger names to their original levels
    """
    logger_names = [logger_name] if isinstance(logger_name, str) else list(logger_name)

    loggers = {name: logging.getLogger(name) for name in logger_names}
    original_levels = {name: lg.level for name, lg in loggers.items()}

    for lg in loggers.values():
        lg.setLevel(level)

    try:
        yield original_levels
    finally:
        for name, lg in loggers.items():
            lg.setLevel(original_levels[name])


@contextmanager
def quiet_logger(logger_name: str | list[str]):
    """Suppress INFO and DEBUG from the named logger(s), keeping WARNING and above."""
    with suppress_logger_level(logger_name, logging.WARNING) as levels:
        yield levels


__all__ = [
    "suppress_logger_level",
    "quiet_logger",
]
