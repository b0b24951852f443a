"""Threads of a process, from ``/proc/<pid>/task/<tid>``."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import OtherError, ProcError, wrap_os_error

PathLike = Union[str, "os.PathLike[str]"]

_DIR_FLAGS = getattr(os, "O_PATH", 0) | os.O_DIRECTORY | getattr(os, "O_CLOEXEC", 0)
_READ_FLAGS = os.O_RDONLY | getattr(os, "O_CLOEXEC", 0)
_INT = re.compile(r"[+-]?[0-9]+")
_UINT = re.compile(r"\+?[0-9]+")


def _parse_i32(text: str) -> Optional[int]:
    if not _INT.fullmatch(text):
        return None
    value = int(text)
    if not -(1 << 31) <= value < (1 << 31):
        return None
    return value


def _parse_u32(text: str) -> int:
    if not _UINT.fullmatch(text) or int(text) >= 1 << 32:
        raise ValueError(text)
    return int(text)


class Task:
    """A task (thread) inside a process.

    The task keeps its ``/proc/<pid>/task/<tid>`` directory open, so later
    reads refer to the same task even if its ID is reused.  Call ``close``
    or use the task as a context manager to release the descriptor early.
    """

    def __init__(self, fd: int, pid: int, tid: int, root: Path) -> None:
        self._fd: Optional[int] = fd
        self.pid = pid
        self.tid = tid
        self.root = root

    @classmethod
    def open(cls, base: PathLike, pid: int, tid: int) -> "Task":
        """Open task ``tid`` of process ``pid``; ``base`` is the ``task`` directory."""
        root = Path(base) / str(tid)
        try:
            fd = os.open(root, _DIR_FLAGS)
        except OSError as exc:
            raise wrap_os_error(root, exc) from exc
        return cls(fd, pid, tid, root)

    def close(self) -> None:
        """Release the descriptor of the task directory."""
        if self._fd is not None:
            fd, self._fd = self._fd, None
            os.close(fd)

    def __enter__(self) -> "Task":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except OSError:
            pass

    def __repr__(self) -> str:
        return f"Task(pid={self.pid}, tid={self.tid}, root={str(self.root)!r})"

    def read_bytes(self, name: str) -> bytes:
        """Read the whole of the file ``name`` inside the task directory."""
        path = self.root / name
        if self._fd is None:
            raise OtherError("task is closed", path)
        try:
            fd = os.open(name, _READ_FLAGS, dir_fd=self._fd)
            with os.fdopen(fd, "rb") as handle:
                return handle.read()
        except OSError as exc:
            raise wrap_os_error(path, exc) from exc

    def read_text(self, name: str) -> str:
        """Read the file ``name`` inside the task directory as text."""
        return self.read_bytes(name).decode("utf-8", errors="surrogateescape")

    def children(self) -> List[int]:
        """Child process IDs of this task, from its ``children`` file.

        This is only reliable when all the children are stopped or frozen.
        """
        try:
            return [_parse_u32(word) for word in self.read_text("children").split()]
        except ValueError:
            raise OtherError("Failed to parse task's child PIDs") from None

    def comm(self) -> str:
        """The command name of this task, from its ``comm`` file."""
        return self.read_text("comm").rstrip("\n")


def iter_tasks(root: PathLike, pid: int) -> Iterator[Task]:
    """Iterate lazily over the tasks of the process whose directory is ``root``.

    The ``task`` directory is opened at once, so a missing process raises
    here; tasks that vanish during iteration are skipped.
    """
    task_dir = Path(root) / "task"
    try:
        entries = os.scandir(task_dir)
    except OSError as exc:
        raise wrap_os_error(task_dir, exc) from exc
    return _generate_tasks(entries, task_dir, pid)


def _generate_tasks(entries: "os._ScandirIterator[str]", task_dir: Path, pid: int) -> Iterator[Task]:
    with entries:
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                return
            except OSError as exc:
                raise wrap_os_error(task_dir, exc) from exc
            tid = _parse_i32(entry.name)
            if tid is None:
                continue
            try:
                task = Task.open(task_dir, pid, tid)
            except ProcError:
                continue
            yield task