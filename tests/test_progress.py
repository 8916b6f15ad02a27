import io
import itertools

import pytest

from pingsweep.events import ProbeCompleted
from pingsweep.progress import ProgressMonitor, estimate_remaining, format_duration


@pytest.mark.parametrize("seconds,expected", [
    (0.0, "0ms"),
    (0.25, "250ms"),
    (1.0, "1.0s"),
    (12.34, "12.3s"),
    (90, "1.5min"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_estimate_remaining():
    assert estimate_remaining(10.0, 5, 20) == pytest.approx(30.0)
    assert estimate_remaining(4.0, 4, 4) == 0
    assert estimate_remaining(3.0, 0, 10) is None


def make_clock(step=0.5):
    ticks = itertools.count()
    return lambda: next(ticks) * step


def test_renders_each_signal_and_final_line():
    stream = io.StringIO()
    monitor = ProgressMonitor(total=2, stream=stream, color=False, clock=make_clock())
    with monitor:
        monitor.events.put(ProbeCompleted("10.0.0.1", True))
        monitor.events.put(ProbeCompleted("10.0.0.2", False))

    output = stream.getvalue()
    assert "\rProgress: 50.0% (1/2)" in output
    assert "\rProgress: 100.0% (2/2) | Elapsed" in output
    assert "ETA: 500ms" in output
    assert output.endswith("| Completed\n")
    assert monitor.completed == 2


def test_final_line_without_signals():
    stream = io.StringIO()
    monitor = ProgressMonitor(total=5, stream=stream, color=False, clock=make_clock())
    monitor.start()
    monitor.finish()
    assert stream.getvalue() == "\rProgress: 100.0% (5/5) | Elapsed: 500ms | Completed\n"


def test_no_eta_before_first_completion():
    monitor = ProgressMonitor(total=4, stream=io.StringIO(), color=False)
    assert "ETA" not in monitor.render_progress(1.0)


def test_cannot_restart():
    monitor = ProgressMonitor(total=1, stream=io.StringIO(), color=False)
    monitor.start()
    monitor.finish()
    with pytest.raises(RuntimeError):
        monitor.start()


def test_signals_after_finish_are_ignored():
    monitor = ProgressMonitor(total=3, stream=io.StringIO(), color=False)
    monitor.start()
    monitor.finish()
    monitor.events.put(ProbeCompleted("10.0.0.9", True))
    assert monitor.completed == 0


def test_disabled_monitor_writes_nothing():
    stream = io.StringIO()
    with ProgressMonitor(total=1, stream=stream, enabled=False) as monitor:
        monitor.events.put(ProbeCompleted("10.0.0.1", True))
    assert stream.getvalue() == ""
    assert monitor.completed == 1


def test_color_output_contains_ansi():
    stream = io.StringIO()
    with ProgressMonitor(total=1, stream=stream, color=True):
        pass
    assert "\x1b[" in stream.getvalue()
