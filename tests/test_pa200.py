import time

import pytest

from pcamctl.pa200 import PA200, extract_latest_line


class FakePort:
    def __init__(self, incoming=b""):
        self.incoming = bytearray(incoming)
        self.closed = False

    @property
    def in_waiting(self):
        return len(self.incoming)

    def read(self, n):
        chunk = bytes(self.incoming[:n])
        del self.incoming[:n]
        return chunk

    def write(self, data):
        return len(data)

    def close(self):
        self.closed = True


@pytest.mark.parametrize(
    "text, first, last, expected",
    [
        ("a\nb\nc", "\n", "\n", "b"),
        ("abc\n", "\n", "\n", None),
        ("no newline", "\n", "\n", None),
        ("$x,1\n$y,2\n", "$", "\n", "y,2"),
        ("x,1\n", "$", "\n", None),
    ],
)
def test_extract_latest_line(text, first, last, expected):
    assert extract_latest_line(text, first, last) == expected


def test_parse_data_sets_raw_data():
    device = PA200("PA200", device=FakePort())
    assert device.parse_data("1.5\n2.5\n", "\n", "\n")
    assert device.raw_data == "PA200, 2.5\n"
    assert device.new


def test_parse_data_without_line_keeps_state():
    device = PA200("PA200", device=FakePort())
    assert not device.parse_data("partial", "\n", "\n")
    assert device.raw_data == ""
    assert not device.new


def test_time_insert_writes_timestamp(tmp_path):
    device = PA200("PA200", device=FakePort(), timestamp=lambda: "TS")
    path = device.start(str(tmp_path))
    assert device.time_insert("abc\ndef")
    assert not device.time_insert("ghi")
    device.stop()
    with open(path, encoding="latin-1") as handle:
        assert handle.read() == "abcTS : \ndefghi"


def test_feed_accumulates_and_extracts(tmp_path):
    device = PA200("PA200", device=FakePort(), timestamp=lambda: "TS")
    device.feed(b"\n12.0")
    assert not device.new
    device.feed(b"\n13.0\n")
    assert device.parse_buf == "\n12.0\n13.0\n"
    assert device.raw_data == "PA200, 13.0\n"


def test_feed_without_display_does_not_parse():
    device = PA200("PA200", display=False, device=FakePort())
    device.feed(b"\n12.0\n")
    assert device.raw_data == ""
    assert device.parse_buf == "\n12.0\n"


def test_thread_reads_port(tmp_path):
    port = FakePort(b"\n10.25 m\n")
    device = PA200("PA200", device=port, timestamp=lambda: "TS")
    path = device.start(str(tmp_path))
    for _ in range(300):
        if device.new:
            break
        time.sleep(0.01)
    device.stop()
    assert device.raw_data == "PA200, 10.25 m\n"
    assert port.closed and device.stopped
    with open(path, encoding="latin-1") as handle:
        assert handle.read() == "TS : \n10.25 m\n"


def test_thread_waits_for_enough_bytes(tmp_path):
    port = FakePort(b"\n1\n")
    device = PA200("PA200", device=port)
    device.start(str(tmp_path))
    time.sleep(0.05)
    device.stop()
    assert port.in_waiting == 3
    assert device.raw_data == ""


def test_start_reports_unopenable_port(tmp_path):
    device = PA200("PA200", str(tmp_path / "no-such-tty"), 9600)
    device.start(str(tmp_path))
    device.stop()
    assert device.error_msgs == ["PA200 ERROR: openPort --- Could not open serial port."]