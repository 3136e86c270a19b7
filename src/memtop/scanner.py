"""Process table scanner for memtop."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import PurePosixPath

import psutil
import structlog

from memtop.models import ProcessSample

log = structlog.get_logger()

DEFAULT_PROCFS_PATH = "/proc"


class ScanError(Exception):
    """The process table or the memory total could not be read at all."""


def command_name(argv: list[str] | tuple[str, ...]) -> str | None:
    """
    Derive the short command name from a process's argument vector.

    Only the first whitespace-separated token of argv[0] is used, and only its
    final path component is kept. Returns None when nothing usable remains.
    """
    if not argv:
        return None
    tokens = argv[0].split(" ")
    name = PurePosixPath(tokens[0]).name if tokens[0] else ""
    if not name or name == "..":
        return None
    return name


@contextmanager
def procfs_root(path: str) -> Iterator[None]:
    """Point psutil at an alternative proc root while the block runs."""
    previous = psutil.PROCFS_PATH
    psutil.PROCFS_PATH = path
    try:
        yield
    finally:
        psutil.PROCFS_PATH = previous


def read_total_memory(procfs_path: str = DEFAULT_PROCFS_PATH) -> int:
    """
    Return total physical memory in kilobytes.

    Raises:
        ScanError: If the total is unreadable or zero.
    """
    try:
        with procfs_root(procfs_path):
            total = psutil.virtual_memory().total
    except (OSError, KeyError, ValueError) as exc:
        raise ScanError(f"could not read total memory from {procfs_path}/meminfo: {exc}") from exc

    total_kb = total // 1024
    if total_kb <= 0:
        raise ScanError(f"total memory reported by {procfs_path}/meminfo is zero")
    return total_kb


class ProcessScanner:
    """
    Single-pass reader of the live process table.

    Every process is read independently. Processes that exit, deny access,
    turn into zombies or leave truncated proc files between being listed and
    being read are skipped, never retried, and never abort the scan.
    """

    def __init__(self, procfs_path: str = DEFAULT_PROCFS_PATH) -> None:
        """
        Initialize the ProcessScanner.

        Args:
            procfs_path: Mount point of the proc filesystem. Default "/proc".
        """
        self._procfs_path = procfs_path

    @property
    def procfs_path(self) -> str:
        """Get the proc root this scanner reads from."""
        return self._procfs_path

    def samples(self) -> Iterator[ProcessSample]:
        """
        Start a scan and return a lazy iterator of process samples.

        The process list is taken eagerly so that an unreadable proc root is
        reported here rather than halfway through the report.

        Raises:
            ScanError: If the proc root cannot be listed.
        """
        try:
            with procfs_root(self._procfs_path):
                pids = psutil.pids()
        except OSError as exc:
            raise ScanError(f"failed to read {self._procfs_path}: {exc}") from exc

        log.debug("scan_started", procfs=self._procfs_path, candidates=len(pids))
        return self._iter_samples(pids)

    def _iter_samples(self, pids: list[int]) -> Iterator[ProcessSample]:
        """Yield a sample for every pid that is still readable."""
        kept = 0
        for pid in pids:
            # Only switch the root around the read, never across a yield
            with procfs_root(self._procfs_path):
                sample = self._read_sample(pid)
            if sample is not None:
                kept += 1
                yield sample
        log.debug("scan_finished", candidates=len(pids), sampled=kept)

    def _read_sample(self, pid: int) -> ProcessSample | None:
        """Read one process, or return None if it should be skipped."""
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                memory_kb = proc.memory_info().rss // 1024
                if memory_kb <= 0:
                    log.debug("process_skipped", pid=pid, reason="no resident memory")
                    return None
                cmdline = proc.cmdline()
                exe_name = self._exe_name(proc)
        except (psutil.Error, OSError, ValueError, IndexError) as exc:
            # Exited, hidden, reaped or half-written mid-scan
            log.debug("process_skipped", pid=pid, reason=type(exc).__name__)
            return None

        command = command_name(cmdline)
        if command is None:
            log.debug("process_skipped", pid=pid, reason="no command name")
            return None

        return ProcessSample(
            pid=pid,
            memory_kb=memory_kb,
            command=command,
            argv=tuple(arg for arg in cmdline if arg),
            exe_name=exe_name,
        )

    @staticmethod
    def _exe_name(proc: psutil.Process) -> str | None:
        """Basename of the process executable, or None if it can't be resolved."""
        try:
            exe = proc.exe()
        except psutil.Error:
            return None
        if not exe:
            return None
        return PurePosixPath(exe).name or None
