"""
Defines the signals passed from the dispatcher's workers to the progress monitor.

Workers never touch shared counters; they only enqueue these messages and the
monitor, as the single owner of the progress state, consumes them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ProbeCompleted:
    """Emitted once per finished probe, whether the host was alive or not."""
    ip: str
    alive: bool


@dataclass(frozen=True)
class ScanFinished:
    """Emitted once, after every probe of the chunk has completed."""
    pass


ProgressSignal = Union[ProbeCompleted, ScanFinished]
