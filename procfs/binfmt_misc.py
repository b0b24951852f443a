"""Registered miscellaneous binary formats, from ``/proc/sys/fs/binfmt_misc``."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import List, Optional, Union

from .errors import InternalError, read_file, read_value, wrap_os_error

_BINFMT_DIR = Path("/proc/sys/fs/binfmt_misc")
_NOT_ENTRIES = frozenset({"status", "register"})
_HEX_BYTE = re.compile(r"[0-9a-fA-F]{2}")
_UINT = re.compile(r"\+?[0-9]+")


class BinFmtFlags(IntFlag):
    """Flags that change how a binary format entry is run."""

    #: Preserve ``argv[0]``: the interpreter gets the original name as an extra argument.
    P = 0x01
    #: Open the binary and pass its descriptor instead of its path.
    O = 0x02  # noqa: E741
    #: Compute credentials from the binary rather than the interpreter; implies ``O``.
    C = 0x04
    #: Open the interpreter when the entry is installed instead of lazily.
    F = 0x08

    @classmethod
    def parse(cls, s: str) -> "BinFmtFlags":
        """Collect the flag letters in ``s``; other characters are ignored."""
        flags = cls(0)
        for char in s:
            if char in cls.__members__:
                flags |= cls[char]
        return flags


@dataclass(frozen=True)
class ExtensionData:
    """An entry matched by file extension (without the period)."""

    extension: str


@dataclass(frozen=True)
class MagicData:
    """An entry matched by a magic byte string at an offset, under a mask."""

    offset: int
    magic: bytes
    mask: bytes


@dataclass(frozen=True)
class BinFmtEntry:
    """A registered binary format entry."""

    name: str
    enabled: bool
    interpreter: str
    flags: BinFmtFlags
    data: Union[ExtensionData, MagicData]

    @classmethod
    def parse(cls, name: str, data: str) -> "BinFmtEntry":
        """Parse the contents of the entry file called ``name``."""
        enabled_flag = False
        interpreter = ""
        extension: Optional[str] = None
        offset = 0
        magic = b""
        mask = b""
        flags = BinFmtFlags(0)

        for line in data.splitlines():
            if line == "enabled":
                enabled_flag = True
            elif line.startswith("interpreter "):
                interpreter = line[len("interpreter ") :]
            elif line.startswith("flags:"):
                flags = BinFmtFlags.parse(line[len("flags:") :])
            elif line.startswith("extension ."):
                extension = line[len("extension .") :]
            elif line.startswith("offset "):
                offset = _parse_offset(line[len("offset ") :])
            elif line.startswith("magic "):
                magic = hex_to_bytes(line[len("magic ") :])
            elif line.startswith("mask "):
                mask = hex_to_bytes(line[len("mask ") :])

        if magic and not mask:
            mask = b"\xff" * len(magic)

        body: Union[ExtensionData, MagicData]
        if extension is not None:
            body = ExtensionData(extension)
        else:
            body = MagicData(offset=offset, magic=magic, mask=mask)
        return cls(
            name=name,
            enabled=enabled_flag,
            interpreter=interpreter,
            flags=flags,
            data=body,
        )


def _parse_offset(text: str) -> int:
    if not _UINT.fullmatch(text) or int(text) > 0xFF:
        raise InternalError(f"Failed to parse offset {text!r}")
    return int(text)


def hex_to_bytes(hex_str: str) -> bytes:
    """Decode a string of hexadecimal digit pairs into bytes."""
    if len(hex_str) % 2 != 0:
        raise InternalError(f"Hex string {hex_str!r} has non-even length")
    pairs = [hex_str[i : i + 2] for i in range(0, len(hex_str), 2)]
    for pair in pairs:
        if not _HEX_BYTE.fullmatch(pair):
            raise InternalError(f"Failed to parse hex byte {pair!r}")
    return bytes(int(pair, 16) for pair in pairs)


def enabled() -> bool:
    """Whether the miscellaneous binary formats system is enabled."""
    return read_value(_BINFMT_DIR / "status", str) == "enabled"


def entries() -> List[BinFmtEntry]:
    """All registered binary format entries."""
    try:
        names = sorted(os.listdir(_BINFMT_DIR))
    except OSError as exc:
        raise wrap_os_error(_BINFMT_DIR, exc) from exc
    return [
        BinFmtEntry.parse(name, read_file(_BINFMT_DIR / name))
        for name in names
        if name not in _NOT_ENTRIES
    ]