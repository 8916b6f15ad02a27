"""
Renders scan results to the console and appends them to the result log.
"""
from __future__ import annotations
import logging
import os
import sys
from typing import IO, Iterable, List, Optional, TextIO

from colorama import Fore, Style

from .errors import LogFileError
from .models import ProbeOutcome, ScanSummary
from .network.utils import last_octet

DEFAULT_COLUMNS = 20
LOG_RULE = "=" * 23


def sort_outcomes(outcomes: Iterable[ProbeOutcome]) -> List[ProbeOutcome]:
    """
    Orders outcomes by the numeric value of the last octet.

    This is a display order, not an address order: 10.0.1.3 sorts before
    10.0.0.5. The sort is stable, so equal octets keep their input order.
    """
    return sorted(outcomes, key=lambda outcome: last_octet(outcome.ip))


def summarize(outcomes: Iterable[ProbeOutcome], timeout_ms: int, elapsed_seconds: float = 0.0) -> ScanSummary:
    return ScanSummary.from_outcomes(outcomes, timeout_ms, elapsed_seconds)


class ResultReporter:
    """Writes the last-octet grid and the alive/dead summary of a chunk."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        columns: int = DEFAULT_COLUMNS,
        cell_width: int = 4,
        color: bool = True,
    ):
        if columns < 1:
            raise ValueError(f"Grid needs at least one column, got {columns}.")
        self.stream = stream if stream is not None else sys.stdout
        self.columns = columns
        self.cell_width = cell_width
        self.color = color

    def _cell(self, outcome: ProbeOutcome) -> str:
        octet = str(last_octet(outcome.ip))
        if self.color:
            color = Fore.GREEN if outcome.alive else Fore.RED
            # pad before coloring so escape codes don't count toward the width
            return f"{color}{octet:<{self.cell_width}}{Style.RESET_ALL}"
        tagged = octet + ("+" if outcome.alive else "-")
        return f"{tagged:<{self.cell_width + 1}}"

    def render_grid(self, outcomes: Iterable[ProbeOutcome]) -> List[str]:
        cells = [self._cell(outcome) for outcome in sort_outcomes(outcomes)]
        return [
            "".join(cells[start:start + self.columns]).rstrip()
            for start in range(0, len(cells), self.columns)
        ]

    def render_summary(self, summary: ScanSummary) -> str:
        if not self.color:
            return (
                f"Alive: {summary.alive} | Dead: {summary.dead} | "
                f"Total: {summary.total} | Timeout: {summary.timeout_ms} ms"
            )
        return (
            f"{Fore.YELLOW}Alive: {Fore.GREEN}{summary.alive}{Fore.YELLOW} | "
            f"Dead: {Fore.RED}{summary.dead}{Fore.YELLOW} | "
            f"Total: {summary.total} | Timeout: {summary.timeout_ms} ms{Style.RESET_ALL}"
        )

    def report(self, outcomes: Iterable[ProbeOutcome], timeout_ms: int, elapsed_seconds: float = 0.0) -> ScanSummary:
        """Prints the grid followed by the summary line and returns the summary."""
        outcomes = list(outcomes)
        for line in self.render_grid(outcomes):
            print(line, file=self.stream)
        summary = summarize(outcomes, timeout_ms, elapsed_seconds)
        print(file=self.stream)
        print(self.render_summary(summary), file=self.stream)
        return summary


class ResultLog:
    """
    Append-only result log.

    Opening is the only fatal step. Once open, write failures are reported
    and the sweep carries on.
    """

    def __init__(self, path: str, stream: Optional[TextIO] = None, color: bool = True):
        self.path = path
        self.stream = stream if stream is not None else sys.stdout
        self.color = color
        self._file: Optional[IO[str]] = None

    def open(self) -> ResultLog:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            self._file = open(self.path, 'a', encoding='utf-8')
        except OSError as e:
            raise LogFileError(f"Could not open log file '{self.path}': {e}") from e
        logging.info(f"Appending results to {self.path}")
        return self

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> ResultLog:
        if self._file is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def write_line(self, message: str) -> bool:
        """Appends one line; returns False (after reporting) if the write failed."""
        if self._file is None:
            raise RuntimeError("ResultLog is not open.")
        try:
            self._file.write(message + "\n")
            self._file.flush()
            return True
        except OSError as e:
            logging.error(f"Error writing to log file {self.path}: {e}")
            text = f"Error writing to log file: {e}"
            print(f"{Fore.RED}{text}{Style.RESET_ALL}" if self.color else text, file=self.stream)
            return False

    def begin_chunk(self, cidr: str):
        self.write_line(f"\n=== Processing Subnet: {cidr} ===")

    def end_chunk(self, cidr: str):
        self.write_line(f"=== Completed Subnet: {cidr} ===\n")

    def log_results(self, outcomes: Iterable[ProbeOutcome], cidr: str, timeout_ms: int):
        """Appends one self-contained results table, in display order."""
        self.write_line(f"=== Results for Subnet: {cidr} (Timeout: {timeout_ms} ms) ===")
        self.write_line("IP Address      Status")
        self.write_line("-" * 23)
        for outcome in sort_outcomes(outcomes):
            self.write_line(f"{outcome.ip:<15} {outcome.status}")
        self.write_line(LOG_RULE)
