"""
Module to assist with logging in the flavor conversion tool.

SPDX-License-Identifier: BSD-3-Clause
Copyright 2020 Intel Corporation
"""

import configparser
import logging
import sys
from typing import TextIO

from flavorconvert import config

LOGGER_NAME = "flavorconvert"

# Records at DEBUG level carry a timestamp and the logger name
DETAILED_FORMATTER = logging.Formatter(
    fmt=r"%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s", datefmt=r"%Y-%m-%d %H:%M:%S"
)


def configured_level() -> int:
    """Return the log level set in the logging configuration, INFO if unset."""
    level = config.get("logging", "level", section=f"logger_{LOGGER_NAME}", fallback="INFO").upper()
    value = logging.getLevelName(level)
    if not isinstance(value, int):
        return logging.INFO
    return value


def _stream_handler(stream: TextIO, level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    if level < logging.INFO:
        handler.setFormatter(DETAILED_FORMATTER)
    return handler


class Logger:
    """Access to the flavorconvert logger.

    Every instance shares the same logger and output stream. The instance
    configured last decides whether debug records are shown.
    """

    _stream: TextIO = sys.stderr

    def __init__(self, verbose: bool = False):
        self._logger = logging.getLogger(LOGGER_NAME)
        # The converted document is printed on stdout
        self._logger.propagate = False
        self._verbose = verbose
        self._configure()

    def setStream(self, stream: TextIO) -> None:
        """Send the log records to the given stream."""
        Logger._stream = stream
        self._configure()

    def enableVerbose(self) -> None:
        """Show debug records."""
        self._verbose = True
        self._configure()

    def disableVerbose(self) -> None:
        """Use the level from the logging configuration."""
        self._verbose = False
        self._configure()

    def _configure(self) -> None:
        if self._verbose:
            self._apply_level(logging.DEBUG)
            return

        try:
            level = configured_level()
        except (configparser.Error, OSError) as e:
            self._apply_level(logging.INFO)
            self._logger.warning("Cannot read the logging configuration, using level INFO: %s", e)
            return

        self._apply_level(level)

    def _apply_level(self, level: int) -> None:
        self._logger.handlers = [_stream_handler(Logger._stream, level)]
        self._logger.setLevel(level)

    def logger(self) -> logging.Logger:
        """Return the logger."""
        return self._logger
