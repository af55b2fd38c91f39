"""Configuration and logging utilities.

Modules:
    config: Configuration builder and access functions
    logger: Component logger on top of Rich
    log_filter: Temporary log suppression helpers
"""

from . import config, log_filter, logger

__all__ = ["config", "logger", "log_filter"]
