"""Command line entry point for memtop."""

import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
import structlog

from memtop import logging as memtop_logging
from memtop.config import Config
from memtop.models import JavaStrategy
from memtop.report import build_rows, format_table, rank, tally
from memtop.scanner import ProcessScanner, ScanError, read_total_memory

log = structlog.get_logger()


def _package_version() -> str:
    try:
        return version("memtop")
    except PackageNotFoundError:
        return "0.0.0"


def run_report(limit: int, strategy: JavaStrategy, procfs_path: str) -> str:
    """
    Take one snapshot of the process table and render the report.

    Raises:
        ScanError: If total memory or the process table is unreadable.
    """
    total_kb = read_total_memory(procfs_path)
    scanner = ProcessScanner(procfs_path)
    totals = tally(scanner.samples(), strategy)
    rows = build_rows(rank(totals), total_kb, limit)
    return format_table(rows)


@click.command()
@click.argument("limit", type=int, required=False)
@click.option(
    "--java-by",
    envvar="MEMTOP_JAVA_BY",
    metavar="auto|jar|main",
    help="How to name Java processes: by -jar archive, by main class, or both (default).",
)
@click.option(
    "--procfs",
    "procfs_path",
    envvar="MEMTOP_PROCFS",
    help="Mount point of the proc filesystem.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default ~/.config/memtop/config.toml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log skipped processes to stderr.")
@click.version_option(version=_package_version(), prog_name="memtop")
def main(
    limit: int | None,
    java_by: str | None,
    procfs_path: str | None,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Show resident memory per application, largest first.

    LIMIT is the number of rows to display (default 20). It must be a whole
    number; anything else is rejected rather than replaced by the default.
    """
    memtop_logging.configure(verbose=verbose)

    try:
        config = Config.load(config_path)
    except ValueError as e:
        click.echo(f"memtop: {e}", err=True)
        sys.exit(1)

    java_by = java_by if java_by is not None else config.java_by
    strategy = JavaStrategy.from_option(java_by)
    if strategy.value != java_by.strip().lower():
        log.warning("unknown_java_strategy", value=java_by, using=strategy.value)

    try:
        table = run_report(
            limit=limit if limit is not None else config.limit,
            strategy=strategy,
            procfs_path=procfs_path or config.procfs_path,
        )
    except ScanError as e:
        click.echo(f"memtop: {e}", err=True)
        sys.exit(1)

    click.echo(table)


if __name__ == "__main__":
    main()
