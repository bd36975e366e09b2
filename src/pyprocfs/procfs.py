"""Readers for system and per-process /proc records."""

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pyprocfs.errors import NoSwapDeviceError, ProcReadError
from pyprocfs.models import CpuTimes, LoadAverage, MemInfo, ProcessRecord, SwapDevice, Uptime
from pyprocfs.parser import (
    parse_cpu_times,
    parse_kernel_release,
    parse_loadavg,
    parse_meminfo,
    parse_process_record,
    parse_stat_counter,
    parse_swaps,
    parse_uptime,
)

logger = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = "/proc"

_PID_NAME = re.compile(r"[0-9]+")


class VanishedProcessPolicy(Enum):
    """What to do when a listed process exits before its record is read."""

    SKIP = "skip"
    FAIL = "fail"


@dataclass(slots=True)
class HostSnapshot:
    """One pass over the host's /proc records."""

    load: LoadAverage
    memory: MemInfo
    swap: SwapDevice | None
    uptime: Uptime
    cpu_times: CpuTimes
    kernel_release: str
    processes: list[ProcessRecord]


class ProcFS:
    """
    Reader bound to one /proc mount.

    Every method performs a single read of the file it needs and parses it;
    nothing is cached between calls, so two calls can observe two different
    instants of kernel state.
    """

    def __init__(
        self,
        proc_root: str | os.PathLike = DEFAULT_PROC_ROOT,
        vanished_policy: VanishedProcessPolicy = VanishedProcessPolicy.SKIP,
    ) -> None:
        """
        Initialize the ProcFS reader.

        Args:
            proc_root: Where procfs is mounted. Default "/proc".
            vanished_policy: Whether list_process_records() skips processes
                that exit between listing and reading, or raises.
        """
        self._root = Path(proc_root)
        self._vanished_policy = VanishedProcessPolicy(vanished_policy)

    @property
    def proc_root(self) -> Path:
        return self._root

    @property
    def vanished_policy(self) -> VanishedProcessPolicy:
        """Get the current vanished-process policy."""
        return self._vanished_policy

    @vanished_policy.setter
    def vanished_policy(self, value: VanishedProcessPolicy | str) -> None:
        """Set the vanished-process policy; accepts the enum or its value."""
        self._vanished_policy = VanishedProcessPolicy(value)

    def _read_text(self, relative: str) -> str:
        path = self._root / relative
        logger.debug("Reading %s", path)
        try:
            return path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as err:
            raise ProcReadError(path, err) from err

    def _read_bytes(self, relative: str) -> bytes:
        path = self._root / relative
        logger.debug("Reading %s", path)
        try:
            return path.read_bytes()
        except OSError as err:
            raise ProcReadError(path, err) from err

    # /proc/loadavg

    def load_average(self) -> LoadAverage:
        return parse_loadavg(self._read_text("loadavg"))

    def load_average_1(self) -> float:
        """Load average over the last minute."""
        return self.load_average().one

    def load_average_5(self) -> float:
        """Load average over the last 5 minutes."""
        return self.load_average().five

    def load_average_15(self) -> float:
        """Load average over the last 15 minutes."""
        return self.load_average().fifteen

    def runnable_queue_size(self) -> int:
        """Number of currently runnable tasks."""
        return self.load_average().runnable

    def task_queue_size(self) -> int:
        """Number of tasks that currently exist on the system."""
        return self.load_average().total_tasks

    def most_recent_pid(self) -> int:
        """PID of the process most recently created on the system."""
        return self.load_average().last_pid

    # /proc/swaps

    def swap_devices(self) -> list[SwapDevice]:
        """All active swap devices; empty when no swap is configured."""
        return parse_swaps(self._read_text("swaps"))

    def swap(self) -> SwapDevice:
        """
        The first swap device listed in /proc/swaps.

        Raises:
            NoSwapDeviceError: No swap device is active.
        """
        devices = self.swap_devices()
        if not devices:
            raise NoSwapDeviceError()
        return devices[0]

    def swap_filename(self) -> str:
        return self.swap().filename

    def swap_type(self) -> str:
        return self.swap().type

    def swap_size(self) -> int:
        return self.swap().size

    def swap_used(self) -> int:
        return self.swap().used

    def swap_priority(self) -> int:
        return self.swap().priority

    # /proc/stat

    def cpu_times(self) -> CpuTimes:
        """Aggregate CPU time accounting since boot, in clock ticks."""
        return parse_cpu_times(self._read_text("stat"))

    def cpu_user_time(self) -> int:
        return self.cpu_times().user

    def cpu_nice_time(self) -> int:
        return self.cpu_times().nice

    def cpu_system_time(self) -> int:
        return self.cpu_times().system

    def cpu_idle_time(self) -> int:
        return self.cpu_times().idle

    def cpu_iowait_time(self) -> int:
        return self.cpu_times().iowait

    def cpu_irq_time(self) -> int:
        return self.cpu_times().irq

    def cpu_softirq_time(self) -> int:
        return self.cpu_times().softirq

    def cpu_steal_time(self) -> int:
        return self.cpu_times().steal

    def cpu_guest_time(self) -> int:
        return self.cpu_times().guest

    def cpu_guest_nice_time(self) -> int:
        return self.cpu_times().guest_nice

    def processes_running(self) -> int:
        """Number of processes currently in a runnable state."""
        return parse_stat_counter(self._read_text("stat"), "procs_running")

    def processes_blocked(self) -> int:
        """Number of processes blocked waiting for I/O."""
        return parse_stat_counter(self._read_text("stat"), "procs_blocked")

    # /proc/uptime

    def uptime(self) -> Uptime:
        return parse_uptime(self._read_text("uptime"))

    def uptime_system(self) -> float:
        """Seconds since boot."""
        return self.uptime().system

    def uptime_idle(self) -> float:
        """Seconds spent idle, summed over all CPUs."""
        return self.uptime().idle

    # /proc/meminfo

    def memory(self) -> MemInfo:
        return parse_meminfo(self._read_text("meminfo"))

    def mem_total(self) -> int:
        return self.memory().total

    def mem_free(self) -> int:
        return self.memory().free

    def mem_used(self) -> int:
        return self.memory().used

    def mem_available(self) -> int:
        return self.memory().available

    def mem_buffers(self) -> int:
        return self.memory().buffers

    def mem_cached(self) -> int:
        return self.memory().cached

    # /proc/sys/kernel/osrelease

    def kernel_release(self) -> str:
        return parse_kernel_release(self._read_text("sys/kernel/osrelease"))

    # Processes

    def list_pids(self) -> list[int]:
        """
        List the process ids present under the proc root.

        Only entries whose name is a decimal number are kept; pseudo
        directories such as "acpi" or "self" are ignored. The order is the
        directory listing's, which the kernel does not guarantee to be sorted.
        """
        try:
            names = os.listdir(self._root)
        except OSError as err:
            raise ProcReadError(self._root, err) from err
        return [int(name) for name in names if _PID_NAME.fullmatch(name)]

    def read_process_record(self, pid: int) -> ProcessRecord:
        """Read and parse /proc/<pid>/stat."""
        return parse_process_record(self._read_bytes(f"{pid}/stat"))

    def list_process_records(self) -> list[ProcessRecord]:
        """
        Read the record of every process currently listed under the proc root.

        A process that exits after being listed is skipped or reported
        according to ``vanished_policy``. Any other read failure, and any
        parse failure, stops the enumeration and propagates.
        """
        records: list[ProcessRecord] = []

        for pid in self.list_pids():
            try:
                records.append(self.read_process_record(pid))
            except ProcReadError as err:
                if err.vanished and self._vanished_policy is VanishedProcessPolicy.SKIP:
                    logger.debug("Skipping pid %d, exited before it could be read", pid)
                    continue
                raise

        return records

    def snapshot(self) -> HostSnapshot:
        """Collect every system reading plus all process records."""
        try:
            swap = self.swap()
        except NoSwapDeviceError:
            swap = None

        return HostSnapshot(
            load=self.load_average(),
            memory=self.memory(),
            swap=swap,
            uptime=self.uptime(),
            cpu_times=self.cpu_times(),
            kernel_release=self.kernel_release(),
            processes=self.list_process_records(),
        )


_default = ProcFS()


def load_average() -> LoadAverage:
    return _default.load_average()


def swap() -> SwapDevice:
    return _default.swap()


def cpu_times() -> CpuTimes:
    return _default.cpu_times()


def uptime() -> Uptime:
    return _default.uptime()


def memory() -> MemInfo:
    return _default.memory()


def kernel_release() -> str:
    return _default.kernel_release()


def read_process_record(pid: int) -> ProcessRecord:
    return _default.read_process_record(pid)


def list_process_records(
    vanished_policy: VanishedProcessPolicy = VanishedProcessPolicy.SKIP,
) -> list[ProcessRecord]:
    """List the records of every process on this host's /proc."""
    return ProcFS(vanished_policy=vanished_policy).list_process_records()
