"""Serial control and telemetry logging for the BUMP controller board."""

from __future__ import annotations

import os
import re
import subprocess
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

import serial

_FLOAT_PREFIX = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def _default_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _to_bytes(data: Union[str, bytes]) -> bytes:
    return data.encode("latin-1") if isinstance(data, str) else bytes(data)


class Stopwatch:
    """Measures accumulated running time between start and stop."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._accumulated = 0.0
        self._started: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started is not None

    def start(self) -> None:
        if self._started is None:
            self._started = self._clock()

    def stop(self) -> None:
        if self._started is not None:
            self._accumulated += self._clock() - self._started
            self._started = None

    def reset(self) -> None:
        """Clear the elapsed time and stop the watch."""
        self._accumulated = 0.0
        self._started = None

    @property
    def elapsed(self) -> float:
        running = self._clock() - self._started if self._started is not None else 0.0
        return self._accumulated + running

    def elapsed_seconds(self) -> int:
        """Return the elapsed time in whole seconds."""
        return int(self.elapsed)


@dataclass(frozen=True)
class BUMPReading:
    """Environmental values reported in one ``$BUMP`` telemetry line."""

    temperature: float
    humidity: float
    pressure: float
    depth: float
    actuator_pos: float


def parse_bump_line(line: str) -> Optional[BUMPReading]:
    """Parse a ``$BUMP,...`` line with eleven values; ``None`` for anything else."""
    tokens = [token for token in line.split(",") if token]
    if not tokens or not tokens[0].startswith("$BUMP"):
        return None
    values = [_atof(token) for token in tokens[1:17]]
    if len(values) != 11:
        return None
    return BUMPReading(
        temperature=values[2],
        humidity=values[3],
        pressure=values[4],
        depth=values[7],
        actuator_pos=values[10],
    )


class BUMPControl:
    """Talks to the BUMP controller over a serial port and logs its output.

    The firmware has a data mode (entered with ``@``) and a command mode
    (entered with ``*``). Every received line is written to a data file
    prefixed by a timestamp.
    """

    def __init__(
        self,
        name: str = "BUMPControl",
        port: str = "",
        baud: int = 115200,
        display: bool = False,
        trim: bool = False,
        *,
        device=None,
        timestamp: Optional[Callable[[], str]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.1,
    ):
        self.name = name
        self.com_port = port
        self.baud = baud
        self.display = display
        self.trim = trim
        self.poll_interval = poll_interval
        self.cmd_mode = False
        self.sequence_running = False
        self.sequence_file = ""
        self.sequence_timer = Stopwatch(clock)
        self.temperature = 0.0
        self.humidity = 0.0
        self.pressure = 0.0
        self.depth = 0.0
        self.actuator_pos = 0.0
        self.trigger_type = 0
        self.error_msgs: list[str] = []
        self.data_path: Optional[str] = None
        self._device = device
        self._timestamp = timestamp or _default_timestamp
        self._sleep = sleep
        self._file = None
        self._buf = ""
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # -- lifecycle ------------------------------------------------------

    def start(self, folder: str) -> str:
        """Open the data file and port, force data mode and start logging.

        Returns the path of the data file.
        """
        self.cmd_mode = False
        self.sequence_running = False
        self.sequence_file = ""
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
        self.assert_data_mode()
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

    def _run(self) -> None:
        while not self._stop_event.is_set():
            device = self._device
            if device is not None:
                with self._lock:
                    available = device.in_waiting
                    chunk = device.read(available) if available > 0 else b""
                if chunk:
                    self.feed(chunk)
            self._stop_event.wait(self.poll_interval)
        self._sleep(0.25)
        self._close()

    def _write(self, data: Union[str, bytes]) -> None:
        if self._device is not None:
            self._device.write(_to_bytes(data))

    # -- modes and commands ---------------------------------------------

    def assert_data_mode(self) -> bool:
        """Force the firmware into data mode."""
        self._write("@")
        return True

    def enter_cmd_mode(self) -> None:
        if not self.cmd_mode:
            with self._lock:
                self._write("*")
            self._sleep(0.02)
            self.cmd_mode = True

    def exit_cmd_mode(self) -> None:
        if self.cmd_mode:
            with self._lock:
                self._write("@")
            self._sleep(0.02)
            self.cmd_mode = False

    def send_command(self, cmd: str) -> None:
        """Send ``cmd``, wrapping it in command mode if not already there."""
        with self._lock:
            if not self.cmd_mode:
                self._write("*")
                self._sleep(0.02)
            print(f"Sent :{cmd}")
            self._write(cmd)
            self._write("\n")
            self._sleep(0.01)
            if not self.cmd_mode:
                self._write("@")
                self._sleep(0.02)
            self._sleep(0.2)

    def load_sequence(self, file_name: str = "") -> bool:
        """Upload a ``.seq`` file to the controller.

        With no name, a file chooser is shown. Returns whether a sequence
        was sent.
        """
        if not file_name:
            try:
                result = subprocess.run(
                    ["zenity", "--title", "Select a sequence file", "--file-selection"],
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except OSError:
                return False
            lines = result.stdout.splitlines(keepends=True)
            if not lines:
                return False
            file_name = lines[0]
        if file_name.endswith("\n"):
            file_name = file_name[:-1]
        self.sequence_file = file_name
        print(f"Selected : {file_name}")
        if ".seq" not in file_name:
            return False
        with self._lock:
            try:
                handle = open(file_name, encoding="latin-1", newline="")
            except OSError:
                return False
            with handle:
                self._write("*loadsequence\n")
                self._sleep(0.05)
                print("Sending lines...")
                for line in handle:
                    if line.endswith("\n"):
                        line = line[:-1]
                    self._write(line + "\n")
                    self._sleep(0.05)
                self._write("@")
        return True

    def run_sequence(self) -> None:
        if not self.sequence_running:
            self._write("*runsequence\n")
            self.cmd_mode = True
            self.sequence_running = True
            self.sequence_timer.reset()
            self.sequence_timer.start()

    def stop_sequence(self) -> None:
        if self.sequence_running:
            self._write(bytes([27]))
            self._write("*")
            self.cmd_mode = False
            self.sequence_running = False
            self.sequence_timer.stop()

    def quick_send(self, cmd: str) -> None:
        """Send a ``!``-style command line without changing modes."""
        with self._lock:
            print(f"Sending quick command: {cmd}", flush=True)
            self._write(cmd)
            self._write("\n")
            self._sleep(0.05)

    @staticmethod
    def fmt_command(prefix: str, val: int) -> str:
        return f"{prefix} {val}"

    def toggle_trigger(self) -> None:
        self.send_command("toggletrigger")

    def set_sat_pow(self, pow: int) -> None:
        self.send_command(self.fmt_command("satpow", pow))

    def set_sat_dur(self, dur: int) -> None:
        self.send_command(self.fmt_command("satdur", dur))

    def set_meas_pow(self, pow: int) -> None:
        self.send_command(self.fmt_command("measpow", pow))

    def set_meas_dur(self, dur: int) -> None:
        self.send_command(self.fmt_command("measdur", dur))

    def set_color_dur(self, dur: int) -> None:
        self.send_command(self.fmt_command("colordur", dur))

    def set_trigger_type(self, trig_type: int) -> None:
        self.send_command(self.fmt_command("trigtype", trig_type))

    def set_frame_rate(self, rate: int) -> None:
        self.send_command(self.fmt_command("framrate", rate))

    # -- telemetry --------------------------------------------------------

    def parse_data(self, line: str) -> Optional[BUMPReading]:
        """Update the latest readings from a telemetry line, if it is one."""
        reading = parse_bump_line(line)
        if reading is not None:
            self.temperature = reading.temperature
            self.humidity = reading.humidity
            self.pressure = reading.pressure
            self.depth = reading.depth
            self.actuator_pos = reading.actuator_pos
        return reading

    def feed(self, data: Union[str, bytes]) -> list[str]:
        """Process received bytes; return the complete lines found.

        Each line is parsed and written to the data file with a timestamp.
        A running sequence ends when its completion banner arrives.
        """
        text = data.decode("latin-1") if isinstance(data, (bytes, bytearray)) else data
        parts = (self._buf + text).split("\n")
        self._buf = parts[-1]
        lines = []
        for part in parts[:-1]:
            line = part + "\n"
            self.parse_data(line)
            if self._file is not None:
                self._file.write(f"{self._timestamp()} : {line}")
            lines.append(line)
        if self._file is not None:
            self._file.flush()
        if (
            self.sequence_running
            and self.sequence_timer.elapsed_seconds() > 1
            and "BUMP:" in self._buf
        ):
            self.sequence_running = False
            self.sequence_timer.stop()
            self._write("@")
            self.cmd_mode = False
        return lines

    def temperature_text(self) -> str:
        return format(self.temperature, ">4g")

    def humidity_text(self) -> str:
        return format(self.humidity, ">4g")

    def depth_text(self) -> str:
        return format(self.depth, ">4g")

    def position_text(self) -> str:
        return format(int(self.actuator_pos), ">3d")