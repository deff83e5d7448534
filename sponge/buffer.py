"""Reference-counted byte buffers that can discard bytes from the front cheaply."""

from __future__ import annotations

import copy
from collections import deque
from typing import Union

BytesInput = Union[bytes, bytearray, memoryview, str]


def _to_bytes(data: BytesInput) -> bytes:
    if isinstance(data, str):
        return data.encode()
    return bytes(data)


class Buffer:
    """A read-only byte string that can drop bytes from its front without copying.

    Copies of a Buffer (``copy.copy``) share the underlying storage, but each
    keeps its own starting offset.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesInput = b"") -> None:
        self._storage = _to_bytes(data)
        self._offset = 0

    def __copy__(self) -> Buffer:
        clone = Buffer.__new__(Buffer)
        clone._storage = self._storage
        clone._offset = self._offset
        return clone

    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset :]

    def __bytes__(self) -> bytes:
        return self._storage[self._offset :]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def at(self, n: int) -> int:
        """The byte at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """The remaining bytes as a new ``bytes`` object."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of several Buffers."""

    def __init__(self, data: Buffer | BytesInput | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, Buffer):
            self._buffers.append(copy.copy(data))
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: BufferList) -> None:
        """Append the Buffers of ``other`` (sharing their storage)."""
        self._buffers.extend(copy.copy(buf) for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the single contiguous Buffer this list holds."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return copy.copy(self._buffers[0])
        raise ValueError(
            "BufferList: use concatenate() to combine a multi-Buffer BufferList into one"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the Buffers."""
        if n < 0 or n > len(self):
            raise IndexError("BufferList.remove_prefix")
        while n > 0:
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """All bytes joined into one ``bytes`` object."""
        return b"".join(bytes(buf) for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesInput) -> None:
        self._views: deque[memoryview]
        if isinstance(data, BufferList):
            self._views = deque(buf.view() for buf in data.buffers())
        elif isinstance(data, Buffer):
            self._views = deque([data.view()])
        elif isinstance(data, str):
            self._views = deque([memoryview(data.encode())])
        else:
            self._views = deque([memoryview(data).cast("B")])

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("BufferViewList.remove_prefix")
        while n > 0:
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """The views as a list suitable for vectored writes such as ``os.writev``."""
        return list(self._views)