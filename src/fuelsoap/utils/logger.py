# fuelsoap/utils/logger.py
"""
Logging configuration for the fuelsoap package.

Provides centralized logging setup to ensure consistent log formatting
and output across all modules in the package.
"""

import logging
from sys import stdout

from .config_loader import LoggingSection


def setup_logger(logging_config: LoggingSection | None = None) -> logging.Logger:
    """
    Set up logging for the fuelsoap package.

    This function configures the package-level logger so that all modules
    (fuelsoap.soap_client, fuelsoap.transport, ...) inherit the same handlers.
    Console output is always enabled; a file handler is added when the
    logging section names a file_path.

    The function is idempotent - calling it multiple times updates handler
    levels rather than adding duplicate handlers. A file handler is still
    added by a later call if file logging was off the first time.

    Args:
        logging_config: The 'logging' section of the loaded configuration.
                        If None, console logging at INFO level is used.

    Returns:
        The configured package logger.

    Example:
        >>> config = load_config()
        >>> setup_logger(config.logging)
    """
    if logging_config is None:
        logging_config = LoggingSection()

    console_level: int = logging_config.get_console_level_int()
    file_level: int | None = logging_config.get_file_level_int()

    package_logger: logging.Logger = logging.getLogger('fuelsoap')

    # The package logger must pass through the most verbose configured level
    levels: list[int] = [console_level]
    if file_level is not None:
        levels.append(file_level)
    package_logger.setLevel(min(levels))

    log_format: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    has_console: bool = False
    has_file: bool = False
    for existing_handler in package_logger.handlers:
        # Handlers from an earlier call only get their levels updated
        if isinstance(existing_handler, logging.FileHandler):
            has_file = True
            existing_handler.setLevel(file_level if file_level is not None else console_level)
        else:
            has_console = True
            existing_handler.setLevel(console_level)

    if not has_console:
        console_handler: logging.Handler = logging.StreamHandler(stdout)
        console_handler.setFormatter(log_format)
        console_handler.setLevel(console_level)
        package_logger.addHandler(console_handler)

    if not has_file and logging_config.file_path is not None and file_level is not None:
        logging_config.file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler: logging.Handler = logging.FileHandler(
            filename=str(logging_config.file_path),
            mode='a',
            encoding='utf-8',
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(file_level)
        package_logger.addHandler(file_handler)
        package_logger.info('Logging to file: %s', logging_config.file_path)

    return package_logger
