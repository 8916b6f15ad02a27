"""
Runs the probe for every address of a chunk under a fixed concurrency ceiling.
"""
from __future__ import annotations
import logging
import queue
import threading
from enum import Enum, auto
from typing import Callable, List, Optional, Sequence

from .events import ProbeCompleted, ProgressSignal
from .models import ProbeOutcome

Probe = Callable[[str, int], bool]

# Tells a worker there is no more work.
_STOP = None


class DispatchState(Enum):
    """Represents the scanning state of a dispatcher."""
    IDLE = auto()
    SCANNING = auto()


class Dispatcher:
    """
    A fixed-size worker pool.

    Each of at most `concurrency` long-lived threads pulls one address at a
    time from the work queue, so no more than `concurrency` probes are ever
    in flight. A worker only takes its next address after it has published
    the outcome and the progress signal of the current one.
    """

    def __init__(self, probe: Probe, concurrency: int, timeout_ms: int):
        if concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {concurrency}.")
        if timeout_ms < 1:
            raise ValueError(f"Timeout must be a positive number of milliseconds, got {timeout_ms}.")
        self.probe = probe
        self.concurrency = concurrency
        self.timeout_ms = timeout_ms
        self.state = DispatchState.IDLE

    def _probe_one(self, ip: str) -> ProbeOutcome:
        """Probes one address. Every failure, whatever its cause, counts as down."""
        try:
            alive = bool(self.probe(ip, self.timeout_ms))
        except Exception as e:
            logging.debug(f"Probe for {ip} raised {e!r}; treating host as down.")
            alive = False
        return ProbeOutcome(ip=ip, alive=alive)

    def _worker(
        self,
        work: queue.Queue,
        results: queue.Queue,
        progress: Optional[queue.Queue],
    ):
        while True:
            ip = work.get()
            if ip is _STOP:
                return
            outcome = self._probe_one(ip)
            results.put(outcome)
            if progress is not None:
                progress.put(ProbeCompleted(ip=outcome.ip, alive=outcome.alive))

    def scan(
        self,
        addresses: Sequence[str],
        progress: Optional[queue.Queue[ProgressSignal]] = None,
    ) -> List[ProbeOutcome]:
        """
        Probes every address and returns one outcome per address.

        The outcomes are in completion order, not input order. This returns
        only after every worker has finished.
        """
        if not addresses:
            return []

        self.state = DispatchState.SCANNING
        work: queue.Queue[Optional[str]] = queue.Queue()
        results: queue.Queue[ProbeOutcome] = queue.Queue()

        for ip in addresses:
            work.put(ip)
        worker_count = min(self.concurrency, len(addresses))
        for _ in range(worker_count):
            work.put(_STOP)

        workers: List[threading.Thread] = []
        try:
            for index in range(worker_count):
                thread = threading.Thread(
                    target=self._worker,
                    args=(work, results, progress),
                    name=f"pingsweep-worker-{index}",
                    daemon=True
                )
                thread.start()
                workers.append(thread)

            for thread in workers:
                thread.join()
        finally:
            self.state = DispatchState.IDLE

        outcomes = []
        try:
            while True:
                outcomes.append(results.get_nowait())
        except queue.Empty:
            pass

        logging.debug(f"Dispatched {len(addresses)} probes across {worker_count} workers.")
        return outcomes
