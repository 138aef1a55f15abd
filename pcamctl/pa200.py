"""Logging of PA200 altimeter output received over a serial port."""

from __future__ import annotations

import os
import threading
import time
from datetime import datetime
from typing import Callable, Optional, Union

import serial


def _default_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def extract_latest_line(s: str, first_char: str, last_char: str) -> Optional[str]:
    """Return the text between the last ``last_char`` and the ``first_char`` before it.

    Returns ``None`` when no such complete line exists.
    """
    end = s.rfind(last_char)
    if end < 0:
        return None
    head = s[:end]
    start = head.rfind(first_char)
    if start < 0:
        return None
    return head[start + 1:]


class PA200:
    """Reads a PA200 serial stream, timestamps it into a file and keeps the latest line."""

    def __init__(
        self,
        name: str = "PA200",
        port: str = "",
        baud: int = 9600,
        display: bool = True,
        trim: bool = False,
        *,
        device=None,
        timestamp: Optional[Callable[[], str]] = None,
        poll_interval: float = 0.01,
    ):
        self.name = name
        self.com_port = port
        self.baud = baud
        self.display = display
        self.trim = trim
        self.poll_interval = poll_interval
        self.raw_data = ""
        self.new = False
        self.temp_buf = ""
        self.parse_buf = ""
        self.error_msgs: list[str] = []
        self.data_path: Optional[str] = None
        self.stopped = True
        self._device = device
        self._timestamp = timestamp or _default_timestamp
        self._file = None
        self._file_failed = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, folder: str) -> str:
        """Open the data file and port and start logging; return the file path."""
        self.stopped = False
        os.makedirs(folder, exist_ok=True)
        self.data_path = os.path.join(folder, f"{self.name}-{int(time.time())}.txt")
        self._file = open(self.data_path, "a", encoding="latin-1", newline="")
        if self._device is None:
            try:
                self._device = serial.Serial(self.com_port, self.baud, timeout=0)
            except (serial.SerialException, OSError, ValueError):
                self.error_msgs.append(
                    f"{self.name} ERROR: openPort --- Could not open serial port."
                )
        self.new = False
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self.data_path

    def stop(self) -> None:
        """Stop logging and close the port and data file."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        else:
            self._close()

    def _close(self) -> None:
        if self._device is not None:
            self._device.close()
        if self._file is not None:
            self._file.close()
            self._file = None
        self.stopped = True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            device = self._device
            if device is not None:
                available = device.in_waiting
                if available > 7:
                    self.feed(device.read(available))
            self._stop_event.wait(self.poll_interval)
        self._close()

    def _emit(self, text: str) -> None:
        if self._file is None:
            return
        try:
            self._file.write(text)
            self._file.flush()
        except OSError:
            if not self._file_failed:
                self._file_failed = True
                self.error_msgs.append(f"{self.name} ERROR: file output --- write failed")

    def feed(self, data: Union[str, bytes]) -> None:
        """Log a received chunk and, when displaying, extract the latest line."""
        text = data.decode("latin-1") if isinstance(data, (bytes, bytearray)) else data
        self.temp_buf = text
        self.parse_buf += text
        self.time_insert(self.temp_buf)
        if self.display:
            self.parse_data(self.parse_buf, "\n", "\n")

    def parse_data(self, s: str, first_char: str, last_char: str) -> bool:
        """Store the latest complete line of ``s`` in ``raw_data``; return whether found."""
        line = extract_latest_line(s, first_char, last_char)
        if line is None:
            return False
        self.raw_data = f"{self.name}, {line}\n"
        self.new = True
        self.temp_buf = ""
        return True

    def time_insert(self, s: str) -> bool:
        """Write ``s`` to the data file with a timestamp at its first newline.

        Returns whether a newline was found.
        """
        pos = s.find("\n")
        if pos < 0:
            self._emit(s)
            return False
        self._emit(s[:pos])
        self._emit(f"{self._timestamp()} : ")
        self._emit(s[pos:])
        return True