"""Console configuration helpers: data folders, loop timing and device settings files."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Optional, Union

PathType = Union[str, "PathLike[str]"]

MAX_INPUT_LENGTH = 50
MAX_BAUD = 1_000_000
MAX_LOOP_TIME = 5000

_LOOP_TIME = re.compile(r"LOOP_TIME=\s*([-+]?\d+)")
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")
_TRAILING_SPACE = " \f\n\r\t\v"


class InputError(ValueError):
    """Raised when console input is empty, too long, not a number or out of range."""


def folder_timestamp(timestamp: float) -> str:
    """Return the local-time stamp used to name data folders."""
    return time.strftime("%m-%d-%Y_%H-%M-%S", time.localtime(int(timestamp)))


def create_data_folder(base: PathType, timestamp: Optional[float] = None) -> str:
    """Create ``<base>/Data/TowData_<stamp>`` and return its path."""
    if timestamp is None:
        timestamp = time.time()
    folder = os.path.join(os.fspath(base), "Data", "TowData_" + folder_timestamp(timestamp))
    os.makedirs(folder, exist_ok=True)
    return folder


def read_loop_time(path: PathType) -> Optional[int]:
    """Return the ``LOOP_TIME`` value from an interface config file.

    The last matching line wins; ``None`` when no line sets it.
    """
    loop_time = None
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            match = _LOOP_TIME.match(line)
            if match:
                loop_time = int(match.group(1))
    return loop_time


def clean_input(line: str) -> str:
    """Return the first word of an input line.

    Empty lines and lines longer than fifty characters are rejected.
    """
    if line.endswith("\n"):
        line = line[:-1]
    if not line:
        raise InputError("no input")
    if len(line) > MAX_INPUT_LENGTH:
        raise InputError("Invalid input! Input length exceeded maximum characters.")
    words = line.rstrip(_TRAILING_SPACE).split()
    return words[0] if words else ""


def int_convert(value: str, range_min: int, range_max: int) -> int:
    """Read a leading integer from ``value`` and check it lies in the range."""
    match = _LEADING_INT.match(value)
    if match is None:
        raise InputError("You entered a non-integer value. Setting not changed.")
    number = int(match.group(1))
    if not range_min <= number <= range_max:
        raise InputError(f"Input was out of range. Min: {range_min} Max: {range_max}")
    return number


def interface_config_text(loop_time: int) -> str:
    return f"LOOP_TIME={int(loop_time)}\n"


def write_interface_config(path: PathType, loop_time: int) -> str:
    """Replace the interface config file with the given loop time; return the text."""
    text = interface_config_text(loop_time)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)
    return text


def _yes_no(flag: bool) -> str:
    return "Y" if flag else "N"


@dataclass
class DeviceSettings:
    """The settings of one serial device as stored in its config file."""

    name: str = ""
    com_port: str = ""
    baud: int = 9600
    display: bool = False
    trim: bool = False
    with_trim: bool = False

    def config_text(self) -> str:
        text = (
            f"NAME={self.name}\nPATH={self.com_port}\nBAUD={int(self.baud)}\n"
            f"DISPLAY_DATA={_yes_no(self.display)}\n"
        )
        if self.with_trim:
            text += f"TRIM_DATA={_yes_no(self.trim)}\n"
        return text

    def write(self, path: PathType) -> str:
        """Replace the config file at ``path`` with these settings; return the text."""
        text = self.config_text()
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return text

    def apply_answers(self, answers: Iterable[str]) -> "DeviceSettings":
        """Update the settings from answers to the name, port, baud, display and trim prompts.

        A missing, empty or invalid answer leaves its setting unchanged.
        """
        pending = list(answers)
        pending += [""] * (5 - len(pending))

        def answer(index: int) -> Optional[str]:
            try:
                return clean_input(pending[index])
            except InputError:
                return None

        name = answer(0)
        if name is not None:
            self.name = name
        port = answer(1)
        if port is not None:
            self.com_port = port
        baud = answer(2)
        if baud is not None:
            try:
                self.baud = int_convert(baud, 0, MAX_BAUD)
            except InputError:
                pass
        display = answer(3)
        if display is not None:
            self.display = display == "Y"
        if self.with_trim:
            trim = answer(4)
            if trim is not None:
                self.trim = trim == "Y"
        return self