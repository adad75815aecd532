"""Sampled logger for per-part log messages.

Uploads can have thousands of parts; logging every one of them floods the
log, so only the first part, the last part and every Nth part are logged.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


def make_sampled_logger(
    log_format: str,
    log_interval: int = 100,
    target_logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
) -> Callable[..., None]:
    """Create a logger function that only logs sampled parts.

    Args:
        log_format: Format string for the log message. The first placeholder
                    receives the part number, the rest receive format_args.
        log_interval: Log every Nth part (default 100)
        target_logger: Logger instance to use (default: module logger)
        level: Log level to use (default: DEBUG)

    Returns:
        A function: (part_number, is_last_part, *format_args) -> None
    """
    _logger = target_logger or logger

    def log_sampled(part_number: int, is_last_part: bool, *format_args: object) -> None:
        should_log = part_number == 1 or is_last_part or part_number % log_interval == 0
        if should_log:
            _logger.log(level, log_format, part_number, *format_args)

    return log_sampled
