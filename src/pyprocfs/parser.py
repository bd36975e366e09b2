"""
Parsers for /proc text records.

Every function here takes the text (or bytes) already read from a /proc file
and returns a model from ``pyprocfs.models``. Nothing touches the filesystem,
so each parser can be fed fixtures directly.
"""

import re
from enum import Enum

from pyprocfs.errors import FieldParseError, MalformedRecordError
from pyprocfs.models import CpuTimes, LoadAverage, MemInfo, ProcessRecord, SwapDevice, Uptime

_SIGNED = re.compile(r"-?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"[0-9]+(\.[0-9]+)?")


class FieldKind(Enum):
    """How a positional /proc/<pid>/stat token is converted."""

    STATE = "state"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    NUMERIC_TEXT = "numeric_text"


# Fields following "pid (comm)", in kernel order (proc(5), fields 3-52).
PROCESS_FIELDS: tuple[tuple[str, FieldKind], ...] = (
    ("state", FieldKind.STATE),
    ("ppid", FieldKind.SIGNED),
    ("pgrp", FieldKind.SIGNED),
    ("session", FieldKind.SIGNED),
    ("tty_nr", FieldKind.SIGNED),
    ("tpgid", FieldKind.SIGNED),
    ("flags", FieldKind.UNSIGNED),
    ("minflt", FieldKind.UNSIGNED),
    ("cminflt", FieldKind.UNSIGNED),
    ("majflt", FieldKind.UNSIGNED),
    ("cmajflt", FieldKind.UNSIGNED),
    ("utime", FieldKind.UNSIGNED),
    ("stime", FieldKind.UNSIGNED),
    ("cutime", FieldKind.SIGNED),
    ("cstime", FieldKind.SIGNED),
    ("priority", FieldKind.SIGNED),
    ("nice", FieldKind.SIGNED),
    ("num_threads", FieldKind.SIGNED),
    ("itrealvalue", FieldKind.SIGNED),
    ("starttime", FieldKind.UNSIGNED),
    ("vsize", FieldKind.UNSIGNED),
    ("rss", FieldKind.SIGNED),
    ("rsslim", FieldKind.NUMERIC_TEXT),
    ("startcode", FieldKind.UNSIGNED),
    ("endcode", FieldKind.UNSIGNED),
    ("startstack", FieldKind.UNSIGNED),
    ("kstkesp", FieldKind.UNSIGNED),
    ("kstkeip", FieldKind.UNSIGNED),
    ("signal", FieldKind.UNSIGNED),
    ("blocked", FieldKind.UNSIGNED),
    ("sigignore", FieldKind.UNSIGNED),
    ("sigcatch", FieldKind.UNSIGNED),
    ("wchan", FieldKind.UNSIGNED),
    ("nswap", FieldKind.UNSIGNED),
    ("cnswap", FieldKind.UNSIGNED),
    ("exit_signal", FieldKind.SIGNED),
    ("processor", FieldKind.SIGNED),
    ("rt_priority", FieldKind.UNSIGNED),
    ("policy", FieldKind.UNSIGNED),
    ("delayacct_blkio_ticks", FieldKind.UNSIGNED),
    ("guest_time", FieldKind.UNSIGNED),
    ("cguest_time", FieldKind.SIGNED),
    ("start_data", FieldKind.UNSIGNED),
    ("end_data", FieldKind.UNSIGNED),
    ("start_brk", FieldKind.UNSIGNED),
    ("arg_start", FieldKind.UNSIGNED),
    ("arg_end", FieldKind.UNSIGNED),
    ("env_start", FieldKind.UNSIGNED),
    ("env_end", FieldKind.UNSIGNED),
    ("exit_code", FieldKind.SIGNED),
)

CPU_TIME_FIELDS = (
    "user",
    "nice",
    "system",
    "idle",
    "iowait",
    "irq",
    "softirq",
    "steal",
    "guest",
    "guest_nice",
)

MEMINFO_KEYS = {
    "total": "MemTotal",
    "free": "MemFree",
    "available": "MemAvailable",
    "buffers": "Buffers",
    "cached": "Cached",
}


def parse_int(field: str, token: str, signed: bool = True) -> int:
    """Parse a strict decimal ASCII integer token."""
    pattern = _SIGNED if signed else _UNSIGNED
    if not pattern.fullmatch(token):
        raise FieldParseError(field, token)
    return int(token)


def parse_float(field: str, token: str) -> float:
    """Parse a non-negative decimal token such as ``0.25`` or ``12345.67``."""
    if not _DECIMAL.fullmatch(token):
        raise FieldParseError(field, token)
    return float(token)


def _convert(field: str, kind: FieldKind, token: str) -> int | str:
    if kind is FieldKind.STATE:
        if len(token) != 1 or token.isspace():
            raise FieldParseError(field, token)
        return token
    if kind is FieldKind.NUMERIC_TEXT:
        if not _UNSIGNED.fullmatch(token):
            raise FieldParseError(field, token)
        return token
    return parse_int(field, token, signed=kind is FieldKind.SIGNED)


def parse_process_record(raw: bytes | str) -> ProcessRecord:
    """
    Parse the contents of /proc/<pid>/stat into a ProcessRecord.

    The executable name sits between the first "(" after the pid and the
    last ")" of the line; it may itself contain spaces and parentheses, so
    the remaining fields are only tokenized after that last ")".

    Args:
        raw: File contents, with or without the trailing newline.

    Raises:
        MalformedRecordError: A delimiter is missing or the field count is wrong.
        FieldParseError: A field token does not match its declared type.
    """
    if isinstance(raw, bytes):
        line = raw.decode("utf-8", errors="surrogateescape")
    else:
        line = raw
    if line.endswith("\n"):
        line = line[:-1]

    pid_token, sep, _ = line.partition(" ")
    if not sep or not _UNSIGNED.fullmatch(pid_token):
        raise MalformedRecordError(f"record does not start with a process id: {pid_token!r}")
    pid = int(pid_token)

    open_paren = line.find("(", len(pid_token) + 1)
    if open_paren == -1:
        raise MalformedRecordError(f"no '(' opening the executable name of pid {pid}")
    close_paren = line.rfind(")")
    if close_paren < open_paren:
        raise MalformedRecordError(f"no ')' closing the executable name of pid {pid}")

    comm = line[open_paren + 1 : close_paren]
    if not comm:
        raise MalformedRecordError(f"empty executable name for pid {pid}")

    rest = line[close_paren + 1 :]
    if not rest.startswith(" "):
        raise MalformedRecordError(f"no field separator after the executable name of pid {pid}")
    tokens = rest[1:].split(" ")
    if len(tokens) != len(PROCESS_FIELDS):
        raise MalformedRecordError(
            f"wrong field count after the executable name of pid {pid}",
            expected=len(PROCESS_FIELDS),
            actual=len(tokens),
        )

    values = {
        name: _convert(name, kind, token)
        for (name, kind), token in zip(PROCESS_FIELDS, tokens)
    }
    return ProcessRecord(pid=pid, comm=comm, **values)


def parse_loadavg(text: str) -> LoadAverage:
    """Parse /proc/loadavg, e.g. ``0.20 0.18 0.12 1/80 11206``."""
    tokens = text.split()
    if len(tokens) != 5:
        raise MalformedRecordError("unexpected /proc/loadavg layout", expected=5, actual=len(tokens))

    runnable, slash, total = tokens[3].partition("/")
    if not slash:
        raise FieldParseError("tasks", tokens[3])

    return LoadAverage(
        one=parse_float("load_1", tokens[0]),
        five=parse_float("load_5", tokens[1]),
        fifteen=parse_float("load_15", tokens[2]),
        runnable=parse_int("runnable", runnable, signed=False),
        total_tasks=parse_int("total_tasks", total, signed=False),
        last_pid=parse_int("last_pid", tokens[4], signed=False),
    )


def parse_swaps(text: str) -> list[SwapDevice]:
    """
    Parse /proc/swaps into one SwapDevice per data line.

    The first line is a column header. Columns are padded with an irregular
    mix of spaces and tabs, so each line is split on any whitespace. An empty
    result means no swap is configured.
    """
    lines = text.splitlines()
    if not lines:
        raise MalformedRecordError("/proc/swaps has no header line")

    devices = []
    for line in lines[1:]:
        columns = line.split()
        if not columns:
            continue
        if len(columns) != 5:
            raise MalformedRecordError(
                "unexpected /proc/swaps line", expected=5, actual=len(columns)
            )
        devices.append(
            SwapDevice(
                filename=columns[0],
                type=columns[1],
                size=parse_int("size", columns[2], signed=False),
                used=parse_int("used", columns[3], signed=False),
                priority=parse_int("priority", columns[4]),
            )
        )
    return devices


def parse_cpu_times(text: str) -> CpuTimes:
    """Parse the aggregate ``cpu`` line, which /proc/stat always puts first."""
    first_line = text.split("\n", 1)[0]
    tokens = first_line.split()
    if not tokens or tokens[0] != "cpu":
        raise MalformedRecordError("/proc/stat does not start with the aggregate cpu line")

    counters = tokens[1:]
    if len(counters) != len(CPU_TIME_FIELDS):
        raise MalformedRecordError(
            "unexpected cpu line in /proc/stat",
            expected=len(CPU_TIME_FIELDS),
            actual=len(counters),
        )
    return CpuTimes(
        **{
            name: parse_int(name, token, signed=False)
            for name, token in zip(CPU_TIME_FIELDS, counters)
        }
    )


def parse_stat_counter(text: str, key: str) -> int:
    """Return the value of a ``key value`` line of /proc/stat, e.g. ``procs_blocked``."""
    for line in text.splitlines():
        tokens = line.split()
        if tokens and tokens[0] == key:
            if len(tokens) != 2:
                raise MalformedRecordError(
                    f"unexpected {key} line in /proc/stat", expected=2, actual=len(tokens)
                )
            return parse_int(key, tokens[1], signed=False)
    raise MalformedRecordError(f"/proc/stat has no {key} line")


def parse_uptime(text: str) -> Uptime:
    """Parse /proc/uptime, e.g. ``350735.47 234388.90``."""
    tokens = text.split()
    if len(tokens) != 2:
        raise MalformedRecordError("unexpected /proc/uptime layout", expected=2, actual=len(tokens))
    return Uptime(
        system=parse_float("uptime_system", tokens[0]),
        idle=parse_float("uptime_idle", tokens[1]),
    )


def parse_meminfo(text: str) -> MemInfo:
    """
    Parse the memory totals out of /proc/meminfo.

    Values are looked up by key rather than line number; lines look like
    ``MemTotal:       16337064 kB``.
    """
    entries = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            entries[key.strip()] = value.split()

    values = {}
    for attr, key in MEMINFO_KEYS.items():
        if key not in entries or not entries[key]:
            raise MalformedRecordError(f"/proc/meminfo has no {key} entry")
        values[attr] = parse_int(key, entries[key][0], signed=False)
    return MemInfo(**values)


def parse_kernel_release(text: str) -> str:
    """Strip the trailing newline from /proc/sys/kernel/osrelease."""
    release = text.rstrip("\n")
    if not release:
        raise MalformedRecordError("kernel release is empty")
    return release
