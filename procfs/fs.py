"""Kernel variables related to filesystems, from ``/proc/sys/fs``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterator, List

from .errors import InternalError, read_file, read_value, write_value

_DENTRY_STATE = "/proc/sys/fs/dentry-state"
_FILE_MAX = "/proc/sys/fs/file-max"
_FILE_NR = "/proc/sys/fs/file-nr"
_MAX_USER_WATCHES = "/proc/sys/fs/epoll/max_user_watches"

_UINT = re.compile(r"\+?[0-9]+")


def _uint(text: str, bits: int) -> int:
    """Parse an unsigned decimal integer that fits in ``bits`` bits."""
    if not _UINT.fullmatch(text):
        raise ValueError(f"invalid unsigned integer {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"{text!r} is too large for a {bits}-bit integer")
    return value


def _fields(s: str, count: int, bits: int) -> List[int]:
    """Parse the first ``count`` whitespace-separated unsigned integers of ``s``."""
    words: Iterator[str] = iter(s.split())
    values = []
    for _ in range(count):
        word = next(words, None)
        if word is None:
            raise InternalError(f"missing field in {s!r}")
        try:
            values.append(_uint(word, bits))
        except ValueError as exc:
            raise InternalError(f"failed to parse {word!r}: {exc}") from None
    return values


@dataclass(frozen=True)
class DEntryState:
    """Status of the directory cache (dcache)."""

    nr_dentry: int
    nr_unused: int
    age_limit: timedelta
    want_pages: bool

    @classmethod
    def parse(cls, s: str) -> "DEntryState":
        """Parse the contents of ``/proc/sys/fs/dentry-state``."""
        nr_dentry, nr_unused, age_limit, want_pages = _fields(s, 4, 32)
        return cls(
            nr_dentry=nr_dentry,
            nr_unused=nr_unused,
            age_limit=timedelta(seconds=age_limit),
            want_pages=want_pages != 0,
        )


@dataclass(frozen=True)
class FileState:
    """Counts of allocated, free and maximum file handles."""

    allocated: int
    free: int
    max: int

    @classmethod
    def parse(cls, s: str) -> "FileState":
        """Parse the contents of ``/proc/sys/fs/file-nr``."""
        allocated, free, maximum = _fields(s, 3, 64)
        return cls(allocated=allocated, free=free, max=maximum)


def dentry_state() -> DEntryState:
    """Information about the status of the directory cache."""
    return DEntryState.parse(read_file(_DENTRY_STATE))


def file_max() -> int:
    """The system-wide limit on the number of open files."""
    return read_value(_FILE_MAX, lambda text: _uint(text, 64))


def set_file_max(value: int) -> None:
    """Set the system-wide limit on the number of open files."""
    write_value(_FILE_MAX, int(value))


def file_nr() -> FileState:
    """The number of allocated, free and maximum file handles."""
    return FileState.parse(read_file(_FILE_NR))


def max_user_watches() -> int:
    """Per-user limit on file descriptors registered across all epoll instances."""
    return read_value(_MAX_USER_WATCHES, lambda text: _uint(text, 64))


def set_max_user_watches(value: int) -> None:
    """Set the per-user limit on file descriptors registered with epoll."""
    write_value(_MAX_USER_WATCHES, int(value))