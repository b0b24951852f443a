"""Error types and small helpers for reading and writing procfs files."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import IO, Any, Callable, Optional, TypeVar, Union

T = TypeVar("T")
PathLike = Union[str, "os.PathLike[str]"]

_NOT_FOUND_CODES = frozenset({errno.ENOENT, errno.ESRCH})
_PERMISSION_CODES = frozenset({errno.EACCES, errno.EPERM})


class ProcError(Exception):
    """Base class for every error raised while reading procfs data."""

    def __init__(self, message: str = "", path: Optional[PathLike] = None) -> None:
        self.message = message
        self.path: Optional[Path] = Path(path) if path is not None else None
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        if self.message:
            return f"{self.message} ({self.path})"
        return str(self.path)


class NotFoundError(ProcError):
    """The file, or the process it belongs to, does not exist."""


class PermissionDeniedError(ProcError):
    """Access to the file was refused."""


class ProcIOError(ProcError):
    """Any other operating-system error."""

    def __init__(
        self,
        message: str = "",
        path: Optional[PathLike] = None,
        code: Optional[int] = None,
    ) -> None:
        super().__init__(message, path)
        self.errno = code


class InternalError(ProcError):
    """The data could not be understood; a bug in the parsing code."""


class OtherError(ProcError):
    """Any error that fits none of the other kinds, such as a parse failure."""


def wrap_os_error(path: PathLike, exc: OSError) -> ProcError:
    """Turn an ``OSError`` raised for ``path`` into the matching ``ProcError``."""
    code = exc.errno
    message = exc.strerror or str(exc)
    if code in _NOT_FOUND_CODES:
        return NotFoundError(message, path)
    if code in _PERMISSION_CODES:
        return PermissionDeniedError(message, path)
    return ProcIOError(message, path, code)


def open_file(path: PathLike, mode: str = "r") -> IO[Any]:
    """Open ``path``, raising a ``ProcError`` that names it on failure."""
    try:
        if "b" in mode:
            return open(path, mode)
        return open(path, mode, encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        raise wrap_os_error(path, exc) from exc


def read_file(path: PathLike) -> str:
    """Read the whole of a text file."""
    try:
        with open(path, "r", encoding="utf-8", errors="surrogateescape") as handle:
            return handle.read()
    except OSError as exc:
        raise wrap_os_error(path, exc) from exc


def read_bytes(path: PathLike) -> bytes:
    """Read the whole of a file as bytes."""
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise wrap_os_error(path, exc) from exc


def write_file(path: PathLike, data: Union[str, bytes]) -> None:
    """Write ``data`` to ``path``, replacing its contents."""
    payload = data.encode("utf-8") if isinstance(data, str) else data
    try:
        with open(path, "wb") as handle:
            handle.write(payload)
    except OSError as exc:
        raise wrap_os_error(path, exc) from exc


def read_value(path: PathLike, parse: Callable[[str], T]) -> T:
    """Read ``path``, strip surrounding whitespace and parse it with ``parse``."""
    text = read_file(path).strip()
    try:
        return parse(text)
    except ValueError as exc:
        raise OtherError(str(exc) or f"failed to parse {text!r}", path) from exc


def write_value(path: PathLike, value: object) -> None:
    """Write the textual form of ``value`` to ``path``."""
    if isinstance(value, (str, bytes)):
        write_file(path, value)
    else:
        write_file(path, str(value))