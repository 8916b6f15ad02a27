"""
Shared fixtures: probes that never touch the network.
"""
import threading
import time

import pytest


class FakeProbe:
    """Answers from a fixed set of live hosts and records every call."""

    def __init__(self, alive=(), delay=0.0):
        self.alive = set(alive)
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, ip, timeout_ms):
        with self._lock:
            self.calls.append((ip, timeout_ms))
        if self.delay:
            time.sleep(self.delay)
        return ip in self.alive


class CountingProbe:
    """Tracks the highest number of probes that were running at the same time."""

    def __init__(self, delay=0.01):
        self.delay = delay
        self.current = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, ip, timeout_ms):
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)
        try:
            time.sleep(self.delay)
            return True
        finally:
            with self._lock:
                self.current -= 1


@pytest.fixture
def fake_probe():
    return FakeProbe


@pytest.fixture
def counting_probe():
    return CountingProbe
