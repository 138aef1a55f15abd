"""Paired console and rotating-file logging for the application."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from os import PathLike
from typing import Optional, TextIO, Union

TRACE = 5
NOTICE = 25
_ROTATION_BYTES = 10 * 1024 * 1024
_FILE_PATTERN = "%(asctime)s : %(message)s"
_DATE_PATTERN = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(NOTICE, "NOTICE")


class Log:
    """Writes messages to the console and to a timestamped log file.

    The console shows only errors when ``quiet`` is set; the file records
    trace-level detail when ``verbose`` is set.
    """

    def __init__(
        self,
        output_log: Union[str, "PathLike[str]"],
        quiet: bool = False,
        verbose: bool = False,
        console: Optional[TextIO] = None,
    ):
        self._console = logging.Logger(f"pcamctl.console.{id(self)}")
        console_handler = logging.StreamHandler(console if console is not None else sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self._console.addHandler(console_handler)
        self._console.setLevel(logging.ERROR if quiet else logging.INFO)

        self._file = logging.Logger(f"pcamctl.file.{id(self)}")
        file_handler = RotatingFileHandler(
            output_log, maxBytes=_ROTATION_BYTES, backupCount=1, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(_FILE_PATTERN, _DATE_PATTERN))
        self._file.addHandler(file_handler)
        self._file.setLevel(TRACE if verbose else logging.INFO)

    def info(self, msg: str) -> None:
        self._console.info(msg)
        self._file.info(msg)

    def error(self, msg: str) -> None:
        self._console.error(msg)
        self._file.error(msg)

    def fatal(self, msg: str) -> None:
        self._console.critical(msg)
        self._file.critical(msg)

    def file_notice(self, msg: str) -> None:
        """Record ``msg`` in the log file only."""
        self._file.log(NOTICE, msg)

    def close(self) -> None:
        for logger in (self._console, self._file):
            for handler in list(logger.handlers):
                handler.flush()
                if isinstance(handler, logging.FileHandler):
                    handler.close()
                logger.removeHandler(handler)

    def __enter__(self) -> "Log":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()