"""Exceptions raised by pyprocfs readers and parsers."""

import errno
import os


class ProcfsError(Exception):
    """Base class for every pyprocfs failure."""


class ProcReadError(ProcfsError):
    """A /proc path could not be read (missing, permission, process gone)."""

    def __init__(self, path: str | os.PathLike, error: OSError) -> None:
        super().__init__(f"unable to read {os.fspath(path)}: {error.strerror or error}")
        self.path = os.fspath(path)
        self.errno = error.errno

    @property
    def vanished(self) -> bool:
        """True when the read failed because the process has exited."""
        return self.errno in (errno.ENOENT, errno.ESRCH)


class MalformedRecordError(ProcfsError):
    """An expected delimiter or the expected number of tokens is absent."""

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        if expected is not None:
            message = f"{message} (expected {expected} fields, got {actual})"
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class FieldParseError(ProcfsError):
    """A token was present but is not valid for its field's type."""

    def __init__(self, field: str, raw_token: str) -> None:
        super().__init__(f"cannot parse field {field!r} from token {raw_token!r}")
        self.field = field
        self.raw_token = raw_token


class NoSwapDeviceError(ProcfsError):
    """/proc/swaps lists no active swap device."""

    def __init__(self) -> None:
        super().__init__("no swap device configured")
