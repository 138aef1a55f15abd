import time

import pytest

from pcamctl.bump import BUMPControl, BUMPReading, Stopwatch, parse_bump_line

EXAMPLE = "$BUMP,1551056140,6303709,34.33,33.91,101163.88,34.51,1050.00,0.37,0.030,12.153,616\n"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakePort:
    def __init__(self, incoming=b""):
        self.written = bytearray()
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
        self.written.extend(data)
        return len(data)

    def close(self):
        self.closed = True


def make_control(port=None, **kwargs):
    return BUMPControl(
        "BUMPControl", "", 115200,
        device=port if port is not None else FakePort(),
        timestamp=lambda: "TS",
        sleep=lambda seconds: None,
        **kwargs,
    )


def test_stopwatch_accumulates_and_resets():
    clock = FakeClock()
    watch = Stopwatch(clock)
    watch.start()
    clock.now = 2.5
    assert watch.elapsed_seconds() == 2
    watch.stop()
    clock.now = 10.0
    assert watch.elapsed == pytest.approx(2.5)
    watch.start()
    clock.now = 11.0
    assert watch.elapsed == pytest.approx(3.5)
    watch.reset()
    assert watch.elapsed == 0.0
    assert not watch.running


def test_parse_example_line():
    reading = parse_bump_line(EXAMPLE)
    assert reading == BUMPReading(34.33, 33.91, 101163.88, 0.37, 616.0)


@pytest.mark.parametrize(
    "line",
    [
        "$GPS,1,2,3,4,5,6,7,8,9,10,11\n",
        EXAMPLE.rstrip("\n") + ",99\n",
        "$BUMP,1,2,3\n",
        "",
    ],
)
def test_parse_rejects_other_lines(line):
    assert parse_bump_line(line) is None


def test_parse_skips_empty_fields():
    line = EXAMPLE.replace(",34.33,", ",,34.33,")
    assert parse_bump_line(line) == parse_bump_line(EXAMPLE)


def test_fmt_command():
    assert BUMPControl.fmt_command("satpow", 50) == "satpow 50"


def test_setters_wrap_in_command_mode():
    port = FakePort()
    control = make_control(port)
    control.set_frame_rate(20)
    control.set_sat_pow(40)
    assert bytes(port.written) == b"*framrate 20\n@*satpow 40\n@"


def test_send_command_in_command_mode_has_no_wrapping():
    port = FakePort()
    control = make_control(port)
    control.enter_cmd_mode()
    control.toggle_trigger()
    control.exit_cmd_mode()
    assert bytes(port.written) == b"*toggletrigger\n@"
    assert not control.cmd_mode


def test_quick_send_sends_line():
    port = FakePort()
    control = make_control(port)
    control.quick_send("!,STOPCAM")
    assert bytes(port.written) == b"!,STOPCAM\n"


def test_run_and_stop_sequence():
    port = FakePort()
    control = make_control(port)
    control.run_sequence()
    control.run_sequence()
    assert bytes(port.written) == b"*runsequence\n"
    assert control.sequence_running and control.cmd_mode
    control.stop_sequence()
    assert bytes(port.written).endswith(b"\x1b*")
    assert not control.sequence_running and not control.cmd_mode


def test_sequence_ends_on_banner():
    clock = FakeClock()
    port = FakePort()
    control = make_control(port, clock=clock)
    control.run_sequence()
    control.feed(b"BUMP: ready")
    assert control.sequence_running
    clock.now = 5.0
    control.feed(b" done")
    assert not control.sequence_running
    assert bytes(port.written).endswith(b"@")
    assert not control.cmd_mode


def test_feed_splits_lines_and_updates_readings():
    control = make_control()
    half = len(EXAMPLE) // 2
    assert control.feed(EXAMPLE[:half].encode()) == []
    assert control.feed(EXAMPLE[half:].encode()) == [EXAMPLE]
    assert control.temperature_text() == "34.33"
    assert control.humidity_text() == "33.91"
    assert control.depth_text() == "0.37"
    assert control.position_text() == "616"


def test_position_text_is_padded():
    control = make_control()
    assert control.position_text() == "  0"


def test_load_sequence_uploads_lines(tmp_path):
    seq = tmp_path / "trial.seq"
    seq.write_text("first\nsecond\n")
    port = FakePort()
    control = make_control(port)
    assert control.load_sequence(str(seq) + "\n")
    assert control.sequence_file == str(seq)
    assert bytes(port.written) == b"*loadsequence\nfirst\nsecond\n@"


def test_load_sequence_ignores_other_files(tmp_path):
    other = tmp_path / "trial.txt"
    other.write_text("first\n")
    port = FakePort()
    control = make_control(port)
    assert not control.load_sequence(str(other))
    assert control.sequence_file == str(other)
    assert bytes(port.written) == b""


def test_thread_logs_received_lines(tmp_path):
    port = FakePort(EXAMPLE.encode())
    control = make_control(port, poll_interval=0.01)
    path = control.start(str(tmp_path))
    for _ in range(300):
        if control.actuator_pos == 616.0:
            break
        time.sleep(0.01)
    control.stop()
    assert control.actuator_pos == 616.0
    assert bytes(port.written).startswith(b"@")
    assert port.closed
    with open(path, encoding="latin-1") as handle:
        assert handle.read() == "TS : " + EXAMPLE


def test_start_reports_unopenable_port(tmp_path):
    control = BUMPControl("BUMPControl", str(tmp_path / "no-such-tty"), 9600,
                          sleep=lambda seconds: None, poll_interval=0.01)
    control.start(str(tmp_path))
    control.stop()
    assert control.error_msgs == ["BUMPControl ERROR: openPort --- Could not open serial port."]