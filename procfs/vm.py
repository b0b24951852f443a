"""Tuning of the virtual memory subsystem, from ``/proc/sys/vm``."""

from __future__ import annotations

from enum import IntEnum

from .errors import read_value, write_value

_ADMIN_RESERVE_KBYTES = "/proc/sys/vm/admin_reserve_kbytes"
_COMPACT_MEMORY = "/proc/sys/vm/compact_memory"
_DROP_CACHES = "/proc/sys/vm/drop_caches"
_MAX_MAP_COUNT = "/proc/sys/vm/max_map_count"


class DropCache(IntEnum):
    """Which clean caches, dentries and inodes to drop from memory."""

    DEFAULT = 0
    PAGE_CACHE = 1
    INODES = 2
    ALL = 3
    DISABLE = 4

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def parse(cls, s: str) -> "DropCache":
        """Parse the numeric form used by ``/proc/sys/vm/drop_caches``."""
        try:
            number = int(s)
        except ValueError:
            raise ValueError("Fail to parse drop cache") from None
        try:
            return cls(number)
        except ValueError:
            raise ValueError("Unknown drop cache value") from None


def admin_reserve_kbytes() -> int:
    """Free memory reserved for users with CAP_SYS_ADMIN, in kilobytes."""
    return read_value(_ADMIN_RESERVE_KBYTES, int)


def set_admin_reserve_kbytes(kbytes: int) -> None:
    """Set the memory reserved for users with CAP_SYS_ADMIN, in kilobytes."""
    write_value(_ADMIN_RESERVE_KBYTES, int(kbytes))


def compact_memory() -> None:
    """Compact all zones so free memory is available in contiguous blocks."""
    write_value(_COMPACT_MEMORY, 1)


def drop_caches(drop: DropCache) -> None:
    """Ask the kernel to drop clean caches, dentries and inodes."""
    write_value(_DROP_CACHES, DropCache(drop))


def max_map_count() -> int:
    """The maximum number of memory map areas a process may have."""
    return read_value(_MAX_MAP_COUNT, int)


def set_max_map_count(count: int) -> None:
    """Set the maximum number of memory map areas a process may have."""
    write_value(_MAX_MAP_COUNT, int(count))