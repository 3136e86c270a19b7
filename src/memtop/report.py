"""Aggregation and table rendering for memtop."""

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from memtop.identity import resolve_key
from memtop.models import Aggregate, JavaStrategy, ProcessSample

log = structlog.get_logger()

DEFAULT_LIMIT = 20

HEADER_FORMAT = "{:<35} {:>4} {:>12} {:>8} {:>8}"
ROW_FORMAT = "{:<35} {:>4} {:>12.2f} {:>7.2f}% {:>7.2f}%"
COLUMNS = ("Application", "Num", "Memory(MB)", "%", "Cum.%")


@dataclass(slots=True, frozen=True)
class ReportRow:
    """One rendered line of the report."""

    key: str
    count: int
    memory_kb: int
    percent: float  # Share of total system memory
    cumulative: float  # Running sum of percent over the rows shown so far

    @property
    def memory_mb(self) -> float:
        """Memory in megabytes."""
        return self.memory_kb / 1024


def aggregate(pairs: Iterable[tuple[str, int]]) -> dict[str, Aggregate]:
    """Fold (key, memory_kb) pairs into per-key totals, ignoring empty entries."""
    totals: dict[str, Aggregate] = {}
    for key, memory_kb in pairs:
        if memory_kb <= 0:
            continue
        entry = totals.get(key)
        if entry is None:
            entry = totals[key] = Aggregate()
        entry.add(memory_kb)
    return totals


def tally(
    samples: Iterable[ProcessSample],
    strategy: JavaStrategy = JavaStrategy.AUTO,
) -> dict[str, Aggregate]:
    """Resolve every sample to its application and aggregate the results."""
    totals = aggregate((resolve_key(sample, strategy), sample.memory_kb) for sample in samples)
    log.debug("tally_finished", applications=len(totals))
    return totals


def rank(totals: dict[str, Aggregate]) -> list[tuple[str, Aggregate]]:
    """Order applications by descending memory, then by name."""
    return sorted(totals.items(), key=lambda item: (-item[1].memory_kb, item[0]))


def build_rows(
    ranked: list[tuple[str, Aggregate]],
    total_kb: int,
    limit: int = DEFAULT_LIMIT,
) -> list[ReportRow]:
    """
    Compute the displayed rows and their percentages.

    Percentages are taken against the full system memory total, not against
    the displayed rows, so the last cumulative value is usually below 100.

    Args:
        ranked: Output of rank().
        total_kb: Total physical memory in kilobytes. Must be positive.
        limit: Maximum number of rows to return.
    """
    if total_kb <= 0:
        raise ValueError("total_kb must be positive")

    rows: list[ReportRow] = []
    cumulative = 0.0
    for key, entry in ranked[: max(limit, 0)]:
        percent = entry.memory_kb * 100.0 / total_kb
        cumulative += percent
        rows.append(
            ReportRow(
                key=key,
                count=entry.count,
                memory_kb=entry.memory_kb,
                percent=percent,
                cumulative=cumulative,
            )
        )
    return rows


def format_row(row: ReportRow) -> str:
    """Format a single report row."""
    return ROW_FORMAT.format(row.key, row.count, row.memory_mb, row.percent, row.cumulative)


def format_table(rows: Iterable[ReportRow]) -> str:
    """Render the header and rows as fixed-width text."""
    lines = [HEADER_FORMAT.format(*COLUMNS)]
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)
