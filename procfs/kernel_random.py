"""Information about the kernel random number generator, from ``/proc/sys/kernel/random``."""

from __future__ import annotations

import re
from pathlib import Path

from .errors import NotFoundError, read_value, write_value

_RANDOM_ROOT = Path("/proc/sys/kernel/random")
_UINT = re.compile(r"\+?[0-9]+")


def _uint(text: str, bits: int) -> int:
    if not _UINT.fullmatch(text) or int(text) >= 1 << bits:
        raise ValueError(f"invalid unsigned {bits}-bit integer {text!r}")
    return int(text)


def _u16(text: str) -> int:
    return _uint(text, 16)


def _u32(text: str) -> int:
    return _uint(text, 32)


def entropy_avail() -> int:
    """The available entropy, in bits (0 to 4096)."""
    return read_value(_RANDOM_ROOT / "entropy_avail", _u16)


def poolsize() -> int:
    """The size of the entropy pool, in bits."""
    return read_value(_RANDOM_ROOT / "poolsize", _u16)


def read_wakeup_threshold() -> int:
    """Bits of entropy needed to wake readers of ``/dev/random``.

    Falls back to ``write_wakeup_threshold`` where the read threshold file
    does not exist.
    """
    try:
        return read_value(_RANDOM_ROOT / "read_wakeup_threshold", _u32)
    except NotFoundError:
        return read_value(_RANDOM_ROOT / "write_wakeup_threshold", _u32)


def write_wakeup_threshold(new_value: int) -> None:
    """Set the entropy level below which writers of ``/dev/random`` are woken."""
    new_value = int(new_value)
    if not 0 <= new_value < 1 << 32:
        raise ValueError(f"{new_value} does not fit in an unsigned 32-bit integer")
    write_value(_RANDOM_ROOT / "write_wakeup_threshold", new_value)


def uuid() -> str:
    """A fresh random 128-bit UUID; each call gives a new one."""
    return read_value(_RANDOM_ROOT / "uuid", str)


def boot_id() -> str:
    """The 128-bit UUID generated at boot."""
    return read_value(_RANDOM_ROOT / "boot_id", str)