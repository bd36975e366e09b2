"""Data models for pyprocfs."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """
    Immutable snapshot of one process, as reported by /proc/<pid>/stat.

    Fields follow the kernel's order. Times are in clock ticks (USER_HZ),
    ``vsize`` is in bytes and ``rss`` in pages.
    """

    # Identity
    pid: int
    comm: str  # Exact bytes between "(" and the last ")", surrogateescape-decoded
    state: str  # 'R', 'S', 'D', 'Z', 'T', etc.
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    # Memory and faults
    flags: int
    minflt: int
    cminflt: int
    majflt: int
    cmajflt: int
    # Timing
    utime: int
    stime: int
    cutime: int
    cstime: int
    # Scheduling
    priority: int
    nice: int
    num_threads: int
    itrealvalue: int
    starttime: int
    # Address space
    vsize: int
    rss: int
    rsslim: str  # Often 2**64 - 1 ("unlimited"), kept as text
    startcode: int
    endcode: int
    startstack: int
    kstkesp: int
    kstkeip: int
    # Signals
    signal: int
    blocked: int
    sigignore: int
    sigcatch: int
    wchan: int
    nswap: int
    cnswap: int
    exit_signal: int
    processor: int
    rt_priority: int
    policy: int
    delayacct_blkio_ticks: int
    guest_time: int
    cguest_time: int
    start_data: int
    end_data: int
    start_brk: int
    arg_start: int
    arg_end: int
    env_start: int
    env_end: int
    exit_code: int

    @property
    def comm_bytes(self) -> bytes:
        """The executable name as the raw bytes the kernel reported."""
        return self.comm.encode("utf-8", errors="surrogateescape")


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """Contents of /proc/loadavg."""

    one: float
    five: float
    fifteen: float
    runnable: int
    total_tasks: int
    last_pid: int


@dataclass(slots=True, frozen=True)
class SwapDevice:
    """One data line of /proc/swaps. Sizes are in kB."""

    filename: str
    type: str
    size: int
    used: int
    priority: int


@dataclass(slots=True, frozen=True)
class CpuTimes:
    """Aggregate "cpu" line of /proc/stat, in clock ticks."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int
    guest: int
    guest_nice: int


@dataclass(slots=True, frozen=True)
class Uptime:
    """Contents of /proc/uptime, in seconds."""

    system: float
    idle: float


@dataclass(slots=True, frozen=True)
class MemInfo:
    """Selected /proc/meminfo values, in kB."""

    total: int
    free: int
    available: int
    buffers: int
    cached: int

    @property
    def used(self) -> int:
        return self.total - self.free
