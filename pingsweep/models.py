from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple, Iterable


@dataclass(frozen=True)
class ProbeOutcome:
    """The alive/dead result of a single probe against one address."""
    ip: str
    alive: bool

    @property
    def status(self) -> str:
        return "UP" if self.alive else "DOWN"


@dataclass(frozen=True)
class ScanSummary:
    """Counts derived from the outcomes of one chunk."""
    alive: int
    dead: int
    total: int
    timeout_ms: int
    elapsed_seconds: float = 0.0

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ProbeOutcome], timeout_ms: int,
                      elapsed_seconds: float = 0.0) -> ScanSummary:
        outcomes = list(outcomes)
        alive = sum(1 for outcome in outcomes if outcome.alive)
        return cls(
            alive=alive,
            dead=len(outcomes) - alive,
            total=len(outcomes),
            timeout_ms=timeout_ms,
            elapsed_seconds=elapsed_seconds,
        )


@dataclass(frozen=True)
class ChunkResult:
    """Everything produced by scanning one chunk."""
    cidr: str
    outcomes: Tuple[ProbeOutcome, ...]
    summary: ScanSummary


@dataclass
class SweepReport:
    """The chunks scanned and the inputs skipped during one invocation."""
    chunks: List[ChunkResult] = field(default_factory=list)
    # (cidr, error) pairs for inputs that were reported and skipped
    errors: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def alive(self) -> int:
        return sum(chunk.summary.alive for chunk in self.chunks)

    @property
    def dead(self) -> int:
        return sum(chunk.summary.dead for chunk in self.chunks)

    @property
    def total(self) -> int:
        return sum(chunk.summary.total for chunk in self.chunks)
