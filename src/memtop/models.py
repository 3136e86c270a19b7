"""Data models for memtop."""

from dataclasses import dataclass
from enum import Enum


class JavaStrategy(Enum):
    """How a JVM process is named in the report."""

    AUTO = "auto"
    JAR = "jar"
    MAIN = "main"

    @classmethod
    def from_option(cls, value: str | None) -> "JavaStrategy":
        """Map a command-line value to a strategy, falling back to AUTO."""
        if value is None:
            return cls.AUTO
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.AUTO


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable snapshot of one process at scan time."""

    pid: int
    memory_kb: int  # Resident set size
    command: str  # Basename of argv[0]
    argv: tuple[str, ...]
    exe_name: str | None  # Basename of the executable, if resolvable


@dataclass(slots=True)
class Aggregate:
    """Running totals for one application row."""

    count: int = 0
    memory_kb: int = 0

    def add(self, memory_kb: int) -> None:
        """Fold one more process into the totals."""
        self.count += 1
        self.memory_kb += memory_kb
