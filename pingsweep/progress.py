"""
Live progress line for one chunk's scan.

The monitor runs on its own thread and is the only owner of the completed
count. It reads from an unbounded queue, so the dispatcher's workers never
wait on it.
"""
from __future__ import annotations
import queue
import sys
import threading
import time
from typing import Callable, Optional, TextIO

from colorama import Fore, Style

from .events import ProbeCompleted, ProgressSignal, ScanFinished


def format_duration(seconds: float) -> str:
    """Formats a duration as milliseconds, seconds or minutes."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}min"


def estimate_remaining(elapsed: float, completed: int, total: int) -> Optional[float]:
    """Linear ETA from the average time per completed probe; None before the first one."""
    if completed <= 0:
        return None
    return elapsed * max(total - completed, 0) / completed


class ProgressMonitor:
    """Consumes progress signals for one chunk and renders a status line."""

    def __init__(
        self,
        total: int,
        stream: Optional[TextIO] = None,
        color: bool = True,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.total = total
        self.stream = stream if stream is not None else sys.stdout
        self.color = color
        self.enabled = enabled
        self.clock = clock
        self.events: queue.Queue[ProgressSignal] = queue.Queue()
        self.completed = 0
        self._start_time: Optional[float] = None
        self._thread: Optional[threading.Thread] = None

    def _paint(self, color: str, text: str) -> str:
        if not self.color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    def _write(self, text: str):
        if not self.enabled:
            return
        self.stream.write(text)
        self.stream.flush()

    def render_progress(self, elapsed: float) -> str:
        percent = self.completed / self.total * 100 if self.total else 100.0
        remaining = estimate_remaining(elapsed, self.completed, self.total)
        line = (
            f"Progress: {percent:.1f}% ({self.completed}/{self.total})"
            f" | Elapsed: {format_duration(elapsed)}"
        )
        if remaining is not None:
            line += f" | ETA: {format_duration(remaining)}"
        return "\r" + self._paint(Fore.YELLOW, line)

    def render_final(self, elapsed: float) -> str:
        line = (
            f"Progress: 100.0% ({self.total}/{self.total})"
            f" | Elapsed: {format_duration(elapsed)} | Completed"
        )
        return "\r" + self._paint(Fore.GREEN, line) + "\n"

    def _run(self):
        while True:
            signal = self.events.get()
            elapsed = self.clock() - self._start_time
            if isinstance(signal, ScanFinished):
                self._write(self.render_final(elapsed))
                return
            if isinstance(signal, ProbeCompleted):
                self.completed += 1
                self._write(self.render_progress(elapsed))

    def start(self) -> ProgressMonitor:
        """Starts consuming signals. A monitor can only be started once."""
        if self._thread is not None:
            raise RuntimeError("ProgressMonitor cannot be restarted; create a new one per chunk.")
        self._start_time = self.clock()
        self._thread = threading.Thread(target=self._run, name="pingsweep-progress", daemon=True)
        self._thread.start()
        return self

    def finish(self):
        """Sends the finished signal and waits for the final line to be rendered."""
        if self._thread is None:
            return
        self.events.put(ScanFinished())
        self._thread.join()

    def __enter__(self) -> ProgressMonitor:
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.finish()
