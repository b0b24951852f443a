"""Kernel information and tuning knobs, from ``/proc/sys/kernel``."""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from datetime import datetime
from enum import IntFlag
from functools import cache
from itertools import takewhile
from typing import ClassVar, FrozenSet, Optional, Union

from .errors import OtherError, ProcError, read_value, write_value

_OSRELEASE = "/proc/sys/kernel/osrelease"
_OSTYPE = "/proc/sys/kernel/ostype"
_VERSION = "/proc/sys/kernel/version"
_PID_MAX = "/proc/sys/kernel/pid_max"
_SEM = "/proc/sys/kernel/sem"
_SHMALL = "/proc/sys/kernel/shmall"
_SHMMAX = "/proc/sys/kernel/shmmax"
_SHMMNI = "/proc/sys/kernel/shmmni"
_SYSRQ = "/proc/sys/kernel/sysrq"
_THREADS_MAX = "/proc/sys/kernel/threads-max"

#: The minimum value accepted by ``threads-max`` on Linux 4.1 or later.
THREADS_MIN = 20
#: The maximum value accepted by ``threads-max`` on Linux 4.1 or later.
THREADS_MAX = 0x3FFF_FFFF

_UINT = re.compile(r"\+?[0-9]+")
_INT = re.compile(r"[+-]?[0-9]+")
_VERSION_PREFIX = re.compile(r"[0-9.]*")


def _parse_uint(text: str, bits: int) -> int:
    """Parse an unsigned decimal integer that must fit in ``bits`` bits."""
    if not _UINT.fullmatch(text):
        raise ValueError(f"invalid unsigned integer {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"{text!r} is too large for a {bits}-bit integer")
    return value


def _parse_int(text: str, bits: int) -> int:
    """Parse a signed decimal integer that must fit in ``bits`` bits."""
    if not _INT.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"{text!r} does not fit in a {bits}-bit integer")
    return value


def _u64(text: str) -> int:
    return _parse_uint(text, 64)


def _u32(text: str) -> int:
    return _parse_uint(text, 32)


@dataclass(frozen=True, order=True)
class Version:
    """A kernel version in major.minor.patch form."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, s: str) -> "Version":
        """Parse ``major.minor.patch``; anything after the numeric part is ignored."""
        numeric = _VERSION_PREFIX.match(s).group(0)
        pieces = iter(numeric.split("."))
        components = []
        for name in ("major", "minor", "patch"):
            piece = next(pieces, None)
            if piece is None:
                raise ValueError(f"Missing {name} version component")
            components.append(piece)

        parsed = []
        for name, piece, bits in zip(("major", "minor", "patch"), components, (8, 8, 16)):
            try:
                parsed.append(_parse_uint(piece, bits))
            except ValueError:
                raise ValueError(f"Failed to parse {name} version") from None
        return cls(*parsed)

    @classmethod
    def current(cls) -> "Version":
        """The version of the running kernel, from ``/proc/sys/kernel/osrelease``."""
        return read_value(_OSRELEASE, cls.parse)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class KernelType:
    """The kernel type, such as ``Linux``."""

    sysname: str

    @classmethod
    def parse(cls, s: str) -> "KernelType":
        """The whole string is the kernel type."""
        return cls(s)

    @classmethod
    def current(cls) -> "KernelType":
        """The type of the running kernel, from ``/proc/sys/kernel/ostype``."""
        return read_value(_OSTYPE, cls.parse)


@dataclass(frozen=True)
class BuildInfo:
    """Kernel build information from ``/proc/sys/kernel/version``."""

    version: str
    flags: FrozenSet[str]
    extra: str

    @classmethod
    def parse(cls, s: str) -> "BuildInfo":
        """Parse a string such as ``#1 SMP PREEMPT Thu Sep 30 15:29:01 UTC 2021``."""
        head, *rest = s.split(" ")
        if not head.startswith("#"):
            raise ValueError("Failed to parse kernel build version")
        version = head[1:]

        flags = set()
        extra = ""
        for index, word in enumerate(rest):
            if all(c.isupper() for c in word):
                flags.add(word)
            else:
                extra = word + " " + " ".join(rest[index + 1 :])
                break
        return cls(version, frozenset(flags), extra)

    @classmethod
    def current(cls) -> "BuildInfo":
        """Build information of the running kernel."""
        return read_value(_VERSION, cls.parse)

    def smp(self) -> bool:
        """Whether the kernel was built with SMP."""
        return "SMP" in self.flags

    def preempt(self) -> bool:
        """Whether the kernel was built with PREEMPT."""
        return "PREEMPT" in self.flags

    def preemptrt(self) -> bool:
        """Whether the kernel was built with PREEMPTRT."""
        return "PREEMPTRT" in self.flags

    def version_number(self) -> int:
        """The leading digits of the version string, e.g. ``21`` for ``21~1``."""
        digits = "".join(takewhile(lambda c: c in string.digits, self.version))
        try:
            return _parse_uint(digits, 32)
        except ValueError:
            raise OtherError("Failed to parse version number") from None

    def extra_date(self) -> datetime:
        """Parse the build date in ``extra`` into a local-time ``datetime``."""
        attempts = (
            (f"{self.extra} +0000", "%a %b %d %H:%M:%S UTC %Y %z"),
            (self.extra, "%a, %d %b %Y %H:%M:%S %z"),
        )
        for text, fmt in attempts:
            try:
                return datetime.strptime(text, fmt).astimezone()
            except ValueError:
                continue
        raise OtherError("Failed to parse extra field to date")


@dataclass(frozen=True)
class SemaphoreLimits:
    """System V semaphore limits from ``/proc/sys/kernel/sem``."""

    semmsl: int
    semmns: int
    semopm: int
    semmni: int

    _NAMES: ClassVar[tuple] = ("SEMMSL", "SEMMNS", "SEMOPM", "SEMMNI")

    @classmethod
    def parse(cls, s: str) -> "SemaphoreLimits":
        """Parse the four whitespace-separated limits."""
        words = iter(s.split())
        raw = []
        for name in cls._NAMES:
            word = next(words, None)
            if word is None:
                raise ValueError(f"Missing {name}")
            raw.append(word)

        values = []
        for name, word in zip(cls._NAMES, raw):
            try:
                values.append(_u64(word))
            except ValueError:
                raise ValueError(f"Failed to parse {name}") from None
        return cls(*values)

    @classmethod
    def current(cls) -> "SemaphoreLimits":
        """The limits currently set on this system."""
        return read_value(_SEM, cls.parse)


class AllowedFunctions(IntFlag):
    """SysRq functions that may be invoked."""

    ENABLE_CONTROL_LOG_LEVEL = 2
    ENABLE_CONTROL_KEYBOARD = 4
    ENABLE_DEBUGGING_DUMPS = 8
    ENABLE_SYNC_COMMAND = 16
    ENABLE_REMOUNT_READ_ONLY = 32
    ENABLE_SIGNALING_PROCESSES = 64
    ALLOW_REBOOT_POWEROFF = 128
    ALLOW_NICING_REAL_TIME_TASKS = 256


_ALLOWED_MASK = 0
for _flag in AllowedFunctions:
    _ALLOWED_MASK |= int(_flag)


@dataclass(frozen=True)
class SysRq:
    """What the SysRq key may do: nothing, everything, or a set of functions.

    ``functions`` is ``None`` unless a specific set of functions is allowed.
    """

    enabled: bool
    functions: Optional[AllowedFunctions] = None

    @classmethod
    def parse(cls, s: str) -> "SysRq":
        """Parse the numeric form used by ``/proc/sys/kernel/sysrq``."""
        number = _parse_uint(s, 16)
        if number == 0:
            return cls(False)
        if number == 1:
            return cls(True)
        if number & ~_ALLOWED_MASK:
            raise ValueError("Invalid value")
        return cls(True, AllowedFunctions(number))

    def to_number(self) -> int:
        """The numeric form written to ``/proc/sys/kernel/sysrq``."""
        if self.functions is not None:
            return int(self.functions)
        return 1 if self.enabled else 0


@cache
def _cached_kernel() -> Union[Version, ProcError]:
    try:
        return Version.current()
    except ProcError as exc:
        return exc


def kernel_version() -> Version:
    """The running kernel's version, read once and remembered."""
    result = _cached_kernel()
    if isinstance(result, ProcError):
        raise result
    return result


def pid_max() -> int:
    """The maximum process ID number."""
    return read_value(_PID_MAX, lambda text: _parse_int(text, 32))


def shmall() -> int:
    """System-wide limit on the total pages of System V shared memory."""
    return read_value(_SHMALL, _u64)


def shmmax() -> int:
    """Maximum size of a System V shared memory segment."""
    return read_value(_SHMMAX, _u64)


def set_shmmax(new_value: int) -> None:
    """Set the maximum size of a System V shared memory segment."""
    write_value(_SHMMAX, int(new_value))


def shmmni() -> int:
    """System-wide maximum number of System V shared memory segments."""
    return read_value(_SHMMNI, _u64)


def sysrq() -> SysRq:
    """The functions allowed to be invoked by the SysRq key."""
    return read_value(_SYSRQ, SysRq.parse)


def set_sysrq(new: SysRq) -> None:
    """Set the functions allowed to be invoked by the SysRq key."""
    write_value(_SYSRQ, new.to_number())


def threads_max() -> int:
    """System-wide limit on the number of threads."""
    return read_value(_THREADS_MAX, _u32)


def set_threads_max(new_limit: int) -> None:
    """Set the system-wide thread limit.

    On Linux 4.1 and later the value must lie within
    ``THREADS_MIN..=THREADS_MAX``; otherwise an ``OtherError`` is raised.
    """
    try:
        kernel: Optional[Version] = kernel_version()
    except ProcError:
        kernel = None
    if (
        kernel is not None
        and kernel.major >= 4
        and kernel.minor >= 1
        and not THREADS_MIN <= new_limit <= THREADS_MAX
    ):
        raise OtherError(f"{new_limit} is outside the THREADS_MIN..=THREADS_MAX range")
    write_value(_THREADS_MAX, int(new_limit))