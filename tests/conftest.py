"""Shared test fixtures for memtop."""

from collections.abc import Iterator
from contextlib import contextmanager

import psutil
import pytest

from memtop import logging as memtop_logging
from memtop.models import ProcessSample


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep debug events out of test output unless a test asks for them."""
    memtop_logging.configure(verbose=False)


def make_sample(
    command: str = "bash",
    memory_kb: int = 1024,
    argv: tuple[str, ...] | None = None,
    exe_name: str | None = None,
    pid: int = 100,
) -> ProcessSample:
    """Create a ProcessSample for testing."""
    return ProcessSample(
        pid=pid,
        memory_kb=memory_kb,
        command=command,
        argv=argv if argv is not None else (command,),
        exe_name=exe_name if exe_name is not None else command,
    )


class FakeMemoryInfo:
    """Stand-in for psutil's memory_info() result."""

    def __init__(self, rss: int) -> None:
        self.rss = rss


class FakeProcess:
    """
    Stand-in for psutil.Process.

    Any of rss, cmdline or exe may be an exception instance, which is raised
    when the corresponding method is called.
    """

    def __init__(
        self,
        pid: int,
        rss: int | Exception = 4096 * 1024,
        cmdline: list[str] | Exception | None = None,
        exe: str | Exception = "",
    ) -> None:
        self.pid = pid
        self._rss = rss
        self._cmdline = cmdline if cmdline is not None else []
        self._exe = exe

    @contextmanager
    def oneshot(self) -> Iterator[None]:
        yield

    def memory_info(self) -> FakeMemoryInfo:
        if isinstance(self._rss, Exception):
            raise self._rss
        return FakeMemoryInfo(self._rss)

    def cmdline(self) -> list[str]:
        if isinstance(self._cmdline, Exception):
            raise self._cmdline
        return list(self._cmdline)

    def exe(self) -> str:
        if isinstance(self._exe, Exception):
            raise self._exe
        return self._exe


@pytest.fixture
def fake_process_table(monkeypatch: pytest.MonkeyPatch):
    """
    Install a fake process table.

    Returns a function taking FakeProcess objects; psutil.pids() and
    psutil.Process() then serve those processes. Pids that are listed but not
    registered raise NoSuchProcess, like a process that exited mid-scan. Pids
    in `broken` raise the given exception when opened.
    """

    def install(
        *processes: FakeProcess,
        extra_pids: tuple[int, ...] = (),
        broken: dict[int, Exception] | None = None,
    ) -> None:
        table = {proc.pid: proc for proc in processes}
        broken = broken or {}
        pids = sorted([*table, *extra_pids, *broken])

        def fake_process(pid: int) -> FakeProcess:
            if pid in broken:
                raise broken[pid]
            if pid not in table:
                raise psutil.NoSuchProcess(pid)
            return table[pid]

        monkeypatch.setattr(psutil, "pids", lambda: list(pids))
        monkeypatch.setattr(psutil, "Process", fake_process)

    return install
