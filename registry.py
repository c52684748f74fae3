"""
Cleanup candidates and the registry that accumulates them during an audit.
"""

from dataclasses import dataclass
from enum import Enum


class Risk(Enum):
    """How many confirmations a candidate needs before anything is touched."""

    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


@dataclass(frozen=True)
class Candidate:
    """One reclaimable item found by a detector."""

    category: str
    size_bytes: int
    path: str
    risk: Risk
    reason: str
    warning: str = ""
    command: str = ""

    def __post_init__(self):
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be non-negative, got {self.size_bytes}")

    @property
    def size_known(self) -> bool:
        return self.size_bytes > 0


class CandidateRegistry:
    """
    Write-once collection of candidates for a single audit run.

    Keeps registration order for the log and exposes a size-descending
    view for display and cleanup.
    """

    def __init__(self):
        self._candidates: list[Candidate] = []
        self._total = 0

    def register(self, candidate: Candidate) -> None:
        self._candidates.append(candidate)
        self._total += candidate.size_bytes

    def all(self) -> list[Candidate]:
        """Candidates by descending size; equal sizes keep registration order."""
        return sorted(self._candidates, key=lambda c: c.size_bytes, reverse=True)

    def in_registration_order(self) -> list[Candidate]:
        return list(self._candidates)

    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._candidates)

    def __bool__(self) -> bool:
        return bool(self._candidates)
