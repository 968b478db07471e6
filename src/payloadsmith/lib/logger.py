"""
Colored console logging for payloadsmith.

This module defines the `Logger` singleton class, a thin wrapper around the
standard `logging` module that prefixes every line with a colored status
symbol and adds a custom `SUCCESS` level between INFO and WARNING.
"""

import logging

from colorama import Fore, Style


class Logger:
    """A singleton class for handling formatted and colored logging."""

    _logger: logging.Logger | None = None

    SUCCESS = 25
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    DEBUG = logging.DEBUG

    @classmethod
    def _log(cls, level: int, message: str) -> None:
        """Write a log message based on log level."""

        if cls._logger is None:
            cls.setup(cls.INFO)

        symbols = {
            cls.SUCCESS: f"{Fore.GREEN}{Style.BRIGHT}[+]{Style.RESET_ALL}",
            cls.INFO: f"{Fore.BLUE}{Style.BRIGHT}[*]{Style.RESET_ALL}",
            cls.WARNING: f"{Fore.YELLOW}{Style.BRIGHT}[!]{Style.RESET_ALL}",
            cls.ERROR: f"{Fore.RED}{Style.BRIGHT}[-]{Style.RESET_ALL}",
            cls.DEBUG: f"{Fore.LIGHTBLACK_EX}{Style.BRIGHT}[>]{Style.RESET_ALL}",
        }

        cls._logger.log(level, f"{symbols[level]} {message}")

    @classmethod
    def set_level(cls, level: int | str) -> None:
        """
        Set the log level for the singleton.

        Args:
            level (int | str): The log level to set.
        """

        cls._logger.setLevel(level)

    @classmethod
    def setup(cls, log_level: int) -> None:
        """
        Set up the Logger singleton with a single stream handler.

        Args:
            log_level (int): The log level to set.
        """

        cls._logger = logging.getLogger("payloadsmith")
        cls._logger.setLevel(log_level)

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        cls._logger.handlers.clear()
        cls._logger.addHandler(handler)

        logging.addLevelName(cls.SUCCESS, "SUCCESS")

    @classmethod
    def success(cls, message: str) -> None:
        """Log a success message."""

        cls._log(cls.SUCCESS, message)

    @classmethod
    def info(cls, message: str) -> None:
        """Log an info message."""

        cls._log(cls.INFO, message)

    @classmethod
    def warning(cls, message: str) -> None:
        """Log a warning message."""

        cls._log(cls.WARNING, message)

    @classmethod
    def error(cls, message: str) -> None:
        """Log an error message."""

        cls._log(cls.ERROR, message)

    @classmethod
    def debug(cls, message: str) -> None:
        """Log a debug message."""

        cls._log(cls.DEBUG, message)
