"""Open file descriptors of a process, from ``/proc/<pid>/fd``."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import Union

from .errors import wrap_os_error

_OWNER_BITS = stat.S_IRWXU


class FDPermissions(IntFlag):
    """Owner read/write/execute bits of an open file descriptor."""

    READ = stat.S_IRUSR
    WRITE = stat.S_IWUSR
    EXECUTE = stat.S_IXUSR


@dataclass(frozen=True)
class FDInfo:
    """A file descriptor and what it points at.

    ``mode`` holds only the owner permission bits; ``target`` is the text of
    the descriptor's symbolic link.
    """

    fd: int
    mode: int
    target: str

    @classmethod
    def from_raw_fd(
        cls, pid: int, raw_fd: int, root: Union[str, "os.PathLike[str]"] = "/proc"
    ) -> "FDInfo":
        """Describe descriptor ``raw_fd`` of process ``pid`` under ``root``."""
        return cls._from_path(Path(root) / str(pid) / "fd" / str(raw_fd), raw_fd)

    @classmethod
    def _from_path(cls, path: Path, fd: int) -> "FDInfo":
        try:
            link = os.readlink(path)
            info = os.lstat(path)
        except OSError as exc:
            raise wrap_os_error(path, exc) from exc
        return cls(fd=fd, mode=info.st_mode & _OWNER_BITS, target=link)

    def permissions(self) -> FDPermissions:
        """The read/write/execute mode of this descriptor as flags."""
        return FDPermissions(self.mode & _OWNER_BITS)

    def __repr__(self) -> str:
        return f"FDInfo(fd={self.fd}, mode=0o{self.mode:o}, target={self.target!r})"