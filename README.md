# pcamctl

`pcamctl` contains the pieces that run the control and telemetry side of a camera rig. It
talks to a BUMP controller board over a serial line, logs the output of a PA200 altimeter,
reads and writes XML configuration files, and writes logs. It also has helpers for the
settings files of the console menu and a writer for 8-bit PGM images.

The package needs Python 3.10 or newer. It depends on `pyserial`.

## Modules

| Module | Contents |
| --- | --- |
| `pcamctl.config` | `XMLConfiguration`, `ConfigError`: access to an XML settings tree by dotted key |
| `pcamctl.log` | `Log`: writes each message to the console and to a rotating log file |
| `pcamctl.bump` | `BUMPControl`, `parse_bump_line`, `BUMPReading`, `Stopwatch` |
| `pcamctl.pa200` | `PA200`, `extract_latest_line` |
| `pcamctl.interface` | `folder_timestamp`, `create_data_folder`, `read_loop_time`, `clean_input`, `int_convert`, `interface_config_text`, `write_interface_config`, `DeviceSettings`, `InputError` |
| `pcamctl.pgm` | `write_pgm_file`, `pgm_header`, `PGMError` |
| `pcamctl.minmax` | `bit_mask`, `bit_mask_s`, `is_power_of_two`, `align`, `is_aligned`, `get_bit`, `is_in_range`, `overlapping_range`, `save_assign`, `get_clipped_value` |
| `pcamctl.helpers` | `second_smaller`, `remove_duplicates`, `var_scope` |

## Configuration

```python
from pcamctl.config import XMLConfiguration

cfg = XMLConfiguration("pcam_config.xml")
rate = cfg.get_double("Camera.FrameRate", 1)
port = cfg.get_string("SerialDevices.SerialDevice[0][@port]", "")
cfg.set_int("Gui.FrameRate", 20)
print(cfg.keys("SerialDevices"))
cfg.save("copy.xml")
```

Keys name elements below the root. A segment can carry a zero-based index among siblings
of the same name (`Device[1]`), and the last segment can select an attribute
(`[@port]`). The getters return the default you pass when a key is absent. Without a
default they raise `ConfigError`, and they also raise it for values that do not parse.
`get_int` reads a `0x` prefix as hex. `get_bool` accepts true/yes/on, false/no/off or a
number. `load` raises `FileNotFoundError` when the file is missing and `ConfigError` when
the XML is malformed. The setters create missing elements as needed.

## Logging

```python
from pcamctl.log import Log

with Log("system.log", quiet=False, verbose=False) as log:
    log.info("started")
    log.error("something failed")
    log.file_notice("goes to the file only")
```

In the file, each line starts with `YYYY-mm-dd HH:MM:SS : `. The file rotates at 10 MB.
With `quiet` the console shows errors only. With `verbose` the file also records
trace-level messages.

## BUMP controller

`parse_bump_line` reads a `$BUMP` telemetry line that carries eleven values. For any other
input it returns `None`:

```python
from pcamctl.bump import parse_bump_line

reading = parse_bump_line(
    "$BUMP,1551056140,6303709,34.33,33.91,101163.88,34.51,1050.00,0.37,0.030,12.153,616"
)
print(reading.temperature, reading.humidity, reading.pressure, reading.depth, reading.actuator_pos)
# 34.33 33.91 101163.88 0.37 616.0
```

`BUMPControl(name, port, baud, ...)` owns the serial link. `start(folder)` opens a data
file named `<name>-<epoch>.txt` in the folder, opens the port and sends `@` to force data
mode. It then starts a thread that passes the received bytes to `feed`. `feed` writes each
complete line to the data file with a timestamp prefix and updates `temperature`,
`humidity`, `pressure`, `depth` and `actuator_pos`. When a running sequence reports its
`BUMP:` banner, `feed` ends the sequence. If the port cannot be opened, a message is added
to `error_msgs`. `stop()` ends the thread and closes the port and the file. For testing
you can pass any object that has `in_waiting`, `read`, `write` and `close` as `device=`.

To send commands, use:

- `send_command(cmd)`, which wraps the command in `*` ... `@` unless the board is already
  in command mode;
- `quick_send(cmd)`;
- `enter_cmd_mode`, `exit_cmd_mode` and `assert_data_mode`;
- the setters `set_sat_pow`, `set_sat_dur`, `set_meas_pow`, `set_meas_dur`,
  `set_color_dur`, `set_trigger_type`, `set_frame_rate` and `toggle_trigger`.

`load_sequence(path)` uploads a `.seq` file. When no path is given it asks for one with a
`zenity` file chooser. `run_sequence()` and `stop_sequence()` start and cancel the
sequence, and `sequence_timer` is a `Stopwatch` that measures how long it runs. For
display, `temperature_text()`, `humidity_text()`, `depth_text()` and `position_text()`
format the latest readings.

## PA200 altimeter

`PA200` works like `BUMPControl`: `start(folder)` begins logging and `stop()` ends it.
`feed` writes each received chunk to the data file and inserts a timestamp after the
first newline. When `display` is set, `feed` also stores the latest complete line in
`raw_data` as `"<name>, <line>\n"` and sets `new`. On its own,
`extract_latest_line(s, "\n", "\n")` returns the text of the last complete line, or
`None` when there is none.

## Console settings files

```python
from pcamctl.interface import int_convert, write_interface_config, read_loop_time, DeviceSettings

loop_time = int_convert("250", 0, 5000)          # InputError if non-numeric or out of range
write_interface_config("interface_config", loop_time)
assert read_loop_time("interface_config") == 250

dev = DeviceSettings(name="PA200", com_port="/dev/ttyUSB0", baud=9600, display=True)
dev.apply_answers(["", "", "19200", "N"])        # empty or invalid answers keep the old value
print(dev.config_text())
# NAME=PA200
# PATH=/dev/ttyUSB0
# BAUD=19200
# DISPLAY_DATA=N
```

When `with_trim` is set, a `TRIM_DATA=` line is added. `create_data_folder(base)` creates
`<base>/Data/TowData_<mm-dd-YYYY_HH-MM-SS>`. `clean_input` rejects empty lines and lines
longer than 50 characters, and returns the first word of the line.

## PGM images

```python
from pcamctl.pgm import write_pgm_file

pixels = bytes(range(256)) * 4
write_pgm_file(pixels, 256, 4, 256, 1, "ramp.pgm")
```

`pitch` is the distance in bytes between the starts of two rows. Any padding beyond the
width is skipped. If there is more than one byte per pixel, if the data is short, or if
the file cannot be written, the function raises `PGMError`.

## What the package does not do

The package does not acquire images from a camera. It also has no queue for captured
frames, no writer for raw frame files, no on-screen control panel and no application or
command-line entry point that would tie these parts into a running system. It provides the
serial devices, configuration, logging and file helpers listed above, and you put them
together yourself.

## Running the tests

Install the `test` extra, then run `pytest` from the project root.