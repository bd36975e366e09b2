"""Shared fixtures: sample records and a fake /proc tree."""

from pathlib import Path

import pytest

from pyprocfs.models import ProcessRecord
from pyprocfs.parser import PROCESS_FIELDS

# /proc/<pid>/stat of an interactive bash, split by field group.
BASH_STAT_LINE = " ".join(
    [
        "1234 (bash) S",
        "1000 1234 1234 34816 5678",  # ppid pgrp session tty_nr tpgid
        "4194304 2500 10000 3 7",  # flags minflt cminflt majflt cmajflt
        "120 45 300 90",  # utime stime cutime cstime
        "20 0 1 0 98765",  # priority nice num_threads itrealvalue starttime
        "23456768 1536 18446744073709551615",  # vsize rss rsslim
        "94000000000000 94000000900000 140730000000000 0 0",  # code, stack, esp, eip
        "0 65536 3686404 1266761467",  # signal blocked sigignore sigcatch
        "1 0 0 17 3",  # wchan nswap cnswap exit_signal processor
        "0 0 4 0 0",  # rt_priority policy delayacct_blkio_ticks guest_time cguest_time
        "94000001000000 94000001040000 94000020000000",  # start_data end_data start_brk
        "140730000001000 140730000001050 140730000001050 140730000002000",  # arg/env
        "0",  # exit_code
    ]
) + "\n"

SH_STAT_LINE = (
    "42 (sh) S 1 42 42 0 -1 4194560 100 0 0 0 2 1 0 0 20 0 1 0 500 4000 100 "
    "18446744073709551615 " + " ".join(["0"] * 27) + "\n"
)

SYSTEMD_STAT_LINE = (
    "1 (systemd) S 0 1 1 0 -1 4194560 51234 987654 120 456 300 200 4000 1500 "
    "20 0 1 0 12 172093440 3210 18446744073709551615 1 1 0 0 0 0 671173123 "
    "4096 1260 1 0 0 17 0 0 0 20 0 0 0 0 0 0 0 0 0 0\n"
)

LOADAVG = "0.20 0.18 0.12 1/80 11206\n"

SWAPS = (
    "Filename\t\t\t\tType\t\tSize\t\tUsed\t\tPriority\n"
    "/dev/sda2                               partition\t8388604\t\t1024\t\t-2\n"
)

STAT = (
    "cpu  10132153 290696 3084719 46828483 16683 0 25195 0 175628 0\n"
    "cpu0 1393280 32966 572056 13343292 6130 0 17875 0 23933 0\n"
    "intr 1462898 0 0\n"
    "ctxt 115315133\n"
    "btime 1769028339\n"
    "processes 86031\n"
    "procs_running 2\n"
    "procs_blocked 1\n"
    "softirq 229245889 94 60001584 13619 5175704 2471304 0 3 0 0\n"
)

UPTIME = "350735.47 234388.90\n"

MEMINFO = (
    "MemTotal:       16337064 kB\n"
    "MemFree:         8123456 kB\n"
    "MemAvailable:   12000000 kB\n"
    "Buffers:          345678 kB\n"
    "Cached:          2345678 kB\n"
    "SwapCached:            0 kB\n"
)

OSRELEASE = "6.1.0-18-amd64\n"


class FakeProc:
    """A /proc-shaped directory tree under tmp_path."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, relative: str, content: str | bytes) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    def add_process(self, pid: int, stat_line: str | bytes) -> None:
        self.write(f"{pid}/stat", stat_line)

    def remove(self, relative: str) -> None:
        (self.root / relative).unlink()


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """A fake proc root with host files and three processes."""
    proc = FakeProc(tmp_path / "proc")
    proc.write("loadavg", LOADAVG)
    proc.write("swaps", SWAPS)
    proc.write("stat", STAT)
    proc.write("uptime", UPTIME)
    proc.write("meminfo", MEMINFO)
    proc.write("sys/kernel/osrelease", OSRELEASE)
    proc.write("version", "Linux version 6.1.0-18-amd64\n")
    (proc.root / "acpi").mkdir()
    (proc.root / "self").mkdir()
    proc.add_process(1, SYSTEMD_STAT_LINE)
    proc.add_process(42, SH_STAT_LINE)
    proc.add_process(1234, BASH_STAT_LINE)
    return proc


@pytest.fixture
def bash_record() -> ProcessRecord:
    """The record BASH_STAT_LINE should parse to, computed by hand."""
    return ProcessRecord(
        pid=1234,
        comm="bash",
        state="S",
        ppid=1000,
        pgrp=1234,
        session=1234,
        tty_nr=34816,
        tpgid=5678,
        flags=4194304,
        minflt=2500,
        cminflt=10000,
        majflt=3,
        cmajflt=7,
        utime=120,
        stime=45,
        cutime=300,
        cstime=90,
        priority=20,
        nice=0,
        num_threads=1,
        itrealvalue=0,
        starttime=98765,
        vsize=23456768,
        rss=1536,
        rsslim="18446744073709551615",
        startcode=94000000000000,
        endcode=94000000900000,
        startstack=140730000000000,
        kstkesp=0,
        kstkeip=0,
        signal=0,
        blocked=65536,
        sigignore=3686404,
        sigcatch=1266761467,
        wchan=1,
        nswap=0,
        cnswap=0,
        exit_signal=17,
        processor=3,
        rt_priority=0,
        policy=0,
        delayacct_blkio_ticks=4,
        guest_time=0,
        cguest_time=0,
        start_data=94000001000000,
        end_data=94000001040000,
        start_brk=94000020000000,
        arg_start=140730000001000,
        arg_end=140730000001050,
        env_start=140730000001050,
        env_end=140730000002000,
        exit_code=0,
    )


@pytest.fixture
def format_stat_line():
    """Render a ProcessRecord back into /proc/<pid>/stat form."""

    def _format(record: ProcessRecord) -> str:
        fields = " ".join(str(getattr(record, name)) for name, _ in PROCESS_FIELDS)
        return f"{record.pid} ({record.comm}) {fields}\n"

    return _format
