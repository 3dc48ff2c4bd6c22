"""Logging configuration for the tablesync package logger."""

from __future__ import annotations

import logging
from enum import StrEnum

from tablesync.core.config import AppSettings

LOGGER_NAME = "tablesync"


class ConsoleFormat(StrEnum):
    """ANSI escape codes used to colour console output."""

    RESET = "\033[0m"
    BLACK = "\033[30m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    LIGHT_GREY = "\033[37m"
    HIGHLIGHT_RED = "\033[41m"
    BOLD = "\033[1m"


class DefaultConsoleFormatter(logging.Formatter):
    """Plain console formatter."""

    fmt = "{asctime} - {name} - {levelname} - {message}"

    def _formatted_message(self, record: logging.LogRecord) -> str:
        return self.fmt

    def format(self, record: logging.LogRecord) -> str:
        formatter = logging.Formatter(self._formatted_message(record), style="{", validate=True)
        return formatter.format(record)


class ColourConsoleFormatter(DefaultConsoleFormatter):
    """Console formatter that colours each line by level."""

    COLOURS = {
        logging.DEBUG: ConsoleFormat.LIGHT_GREY,
        logging.INFO: ConsoleFormat.BLUE,
        logging.WARNING: ConsoleFormat.YELLOW,
        logging.ERROR: ConsoleFormat.RED,
        logging.CRITICAL: ConsoleFormat.BOLD + ConsoleFormat.HIGHLIGHT_RED + ConsoleFormat.BLACK,
    }

    def _formatted_message(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelno, ConsoleFormat.RESET)
        return f"{colour}{self.fmt}{ConsoleFormat.RESET}"


def configure_logging(settings: AppSettings | None = None) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Safe to call more than once; an existing handler installed here is replaced.
    """
    if settings is None:
        settings = AppSettings()

    handler = logging.StreamHandler()
    handler.setLevel(settings.log_level)
    handler.setFormatter(ColourConsoleFormatter() if settings.log_colour else DefaultConsoleFormatter())
    handler.set_name(LOGGER_NAME)

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if existing.get_name() == LOGGER_NAME:
            logger.removeHandler(existing)
    logger.setLevel(settings.log_level)
    logger.addHandler(handler)
    return logger
