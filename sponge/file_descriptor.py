"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import os
import sys
from collections import deque
from typing import Union

from .buffer import Buffer, BufferList, BufferViewList
from .util import UnixError

_BUFFER_SIZE = 1024 * 1024  # largest single read

Writable = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]


def _unix_error(attempt: str, exc: OSError) -> UnixError:
    return UnixError(attempt, exc.errno or 0)


class _FDWrapper:
    """The shared state behind one kernel file descriptor; closes it when collected."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise _unix_error("close", exc) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if self.closed:
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle to a file descriptor that tracks EOF, closure, reads and writes.

    Copies made with :meth:`duplicate` share the same descriptor and counters;
    the descriptor is closed when the last of them is gone.
    """

    def __init__(self, fd: int) -> None:
        self._internal_fd = _FDWrapper(fd)

    def _register_read(self) -> None:
        self._internal_fd.read_count += 1

    def _register_write(self) -> None:
        self._internal_fd.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size = _BUFFER_SIZE if limit is None else min(_BUFFER_SIZE, limit)
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            raise _unix_error("read", exc) from exc
        if size > 0 and not data:
            self._internal_fd.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all`` keep going until all of it is written."""
        if isinstance(data, BufferViewList):
            views = deque(data.as_iovecs())
        else:
            views = deque(BufferViewList(data).as_iovecs())
        remaining = sum(len(view) for view in views)
        total = 0
        while True:
            try:
                written = os.writev(self.fd_num(), list(views))
            except OSError as exc:
                raise _unix_error("writev", exc) from exc
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            _drop_prefix(views, written)
            remaining -= written
            total += written
            if not (write_all and remaining):
                return total

    def close(self) -> None:
        """Close the underlying file descriptor."""
        self._internal_fd.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its counters."""
        copy = FileDescriptor.__new__(FileDescriptor)
        copy._internal_fd = self._internal_fd
        return copy

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        try:
            os.set_blocking(self.fd_num(), blocking_state)
        except OSError as exc:
            raise _unix_error("fcntl", exc) from exc

    def fd_num(self) -> int:
        return self._internal_fd.fd

    def fileno(self) -> int:
        return self._internal_fd.fd

    def eof(self) -> bool:
        return self._internal_fd.eof

    def closed(self) -> bool:
        return self._internal_fd.closed

    def read_count(self) -> int:
        return self._internal_fd.read_count

    def write_count(self) -> int:
        return self._internal_fd.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed():
            self.close()


def _drop_prefix(views: deque[memoryview], n: int) -> None:
    while n > 0:
        front = views[0]
        if n < len(front):
            views[0] = front[n:]
            n = 0
        else:
            n -= len(front)
            views.popleft()