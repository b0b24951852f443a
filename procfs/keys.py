"""Limits of the in-kernel key management facility, from ``/proc/sys/kernel/keys``."""

from __future__ import annotations

import re
from pathlib import Path

from .errors import read_value, write_value

_KEYS_DIR = Path("/proc/sys/kernel/keys")
_UINT = re.compile(r"\+?[0-9]+")


def _u32(text: str) -> int:
    if not _UINT.fullmatch(text) or int(text) >= 1 << 32:
        raise ValueError(f"invalid unsigned 32-bit integer {text!r}")
    return int(text)


def _read(name: str) -> int:
    return read_value(_KEYS_DIR / name, _u32)


def _write(name: str, value: int) -> None:
    value = int(value)
    if not 0 <= value < 1 << 32:
        raise ValueError(f"{value} does not fit in an unsigned 32-bit integer")
    write_value(_KEYS_DIR / name, value)


def gc_delay() -> int:
    """Seconds after which revoked and expired keys are garbage collected."""
    return _read("gc_delay")


def persistent_keyring_expiry() -> int:
    """Seconds to which a persistent keyring's expiry timer is reset on access."""
    return _read("persistent_keyring_expiry")


def maxbytes() -> int:
    """Maximum bytes of key payload a non-root user may hold."""
    return _read("maxbytes")


def set_maxbytes(nbytes: int) -> None:
    """Set the maximum bytes of key payload a non-root user may hold."""
    _write("maxbytes", nbytes)


def maxkeys() -> int:
    """Maximum number of keys a non-root user may own."""
    return _read("maxkeys")


def set_maxkeys(keys: int) -> None:
    """Set the maximum number of keys a non-root user may own."""
    _write("maxkeys", keys)


def root_maxbytes() -> int:
    """Maximum bytes of key payload the root user may hold."""
    return _read("root_maxbytes")


def set_root_maxbytes(nbytes: int) -> None:
    """Set the maximum bytes of key payload the root user may hold."""
    _write("root_maxbytes", nbytes)


def root_maxkeys() -> int:
    """Maximum number of keys the root user may own."""
    return _read("root_maxkeys")


def set_root_maxkeys(keys: int) -> None:
    """Set the maximum number of keys the root user may own."""
    _write("root_maxkeys", keys)