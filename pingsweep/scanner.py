"""
Coordinates a sweep: CIDR inputs are split into chunks, and each chunk is
expanded, dispatched, reported and logged before the next one starts.
"""
from __future__ import annotations
import logging
import sys
import time
from typing import Iterable, Optional, TextIO

from colorama import Fore, Style

from .dispatcher import Dispatcher, Probe
from .errors import ParseError, RangeTooSmall, UnsupportedAddressFamily
from .models import ChunkResult, SweepReport
from .parsing import expand, subdivide
from .progress import ProgressMonitor
from .reporting import ResultLog, ResultReporter, sort_outcomes

# Errors that only invalidate the one CIDR they came from.
INPUT_ERRORS = (ParseError, UnsupportedAddressFamily, RangeTooSmall)


class Sweeper:
    """Runs a sweep over a list of CIDR blocks with partial-failure semantics."""

    def __init__(
        self,
        probe: Probe,
        timeout_ms: int,
        concurrency: int,
        reporter: Optional[ResultReporter] = None,
        result_log: Optional[ResultLog] = None,
        stream: Optional[TextIO] = None,
        color: bool = True,
        show_progress: bool = True,
    ):
        self.stream = stream if stream is not None else sys.stdout
        self.dispatcher = Dispatcher(probe, concurrency, timeout_ms)
        self.timeout_ms = timeout_ms
        self.reporter = reporter or ResultReporter(stream=self.stream, color=color)
        self.result_log = result_log
        self.color = color
        self.show_progress = show_progress

    def _say(self, color: str, message: str):
        if self.color:
            message = f"{color}{message}{Style.RESET_ALL}"
        print(message, file=self.stream)

    def _skip(self, report: SweepReport, cidr: str, error: Exception):
        logging.warning(f"Skipping {cidr}: {error}")
        self._say(Fore.RED, f"Error in CIDR {cidr}: {error}")
        report.errors.append((cidr, error))

    def scan_chunk(self, chunk: str) -> ChunkResult:
        """
        Scans one /24-or-smaller chunk.

        Raises the Range Expander's errors if the chunk cannot be expanded.
        """
        addresses = expand(chunk)

        self._say(Fore.YELLOW, f"\nProcessing Subnet: {chunk} ({len(addresses)} IPs)")
        if self.result_log:
            self.result_log.begin_chunk(chunk)

        monitor = ProgressMonitor(
            total=len(addresses),
            stream=self.stream,
            color=self.color,
            enabled=self.show_progress,
        )
        started = time.monotonic()
        with monitor:
            outcomes = self.dispatcher.scan(addresses, progress=monitor.events)
        elapsed = time.monotonic() - started

        self._say(Fore.YELLOW, f"\nScan completed for Subnet: {chunk}")
        summary = self.reporter.report(outcomes, self.timeout_ms, elapsed)

        if self.result_log:
            self.result_log.log_results(outcomes, chunk, self.timeout_ms)
            self.result_log.end_chunk(chunk)

        logging.info(f"{chunk}: {summary.alive} alive, {summary.dead} dead in {elapsed:.2f}s")
        return ChunkResult(cidr=chunk, outcomes=tuple(sort_outcomes(outcomes)), summary=summary)

    def run(self, cidrs: Iterable[str]) -> SweepReport:
        """Scans every chunk of every CIDR; bad inputs are reported and skipped."""
        report = SweepReport()
        for cidr in cidrs:
            try:
                chunks = subdivide(cidr)
            except INPUT_ERRORS as e:
                self._skip(report, cidr, e)
                continue

            for chunk in chunks:
                try:
                    report.chunks.append(self.scan_chunk(chunk))
                except INPUT_ERRORS as e:
                    self._skip(report, chunk, e)
                    continue
                print(file=self.stream)
        return report
