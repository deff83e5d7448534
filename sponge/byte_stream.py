"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations


class ByteStream:
    """An in-order byte stream with a fixed capacity.

    Bytes are written on the input side and read from the output side.
    The writer can end the input; once every written byte has been read
    after that, the stream is at EOF.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Input side

    def write(self, data: bytes) -> int:
        """Write as much of ``data`` as fits and return how many bytes were accepted."""
        accepted = bytes(data[: self.remaining_capacity()])
        self._buffer += accepted
        self._bytes_written += len(accepted)
        return len(accepted)

    def remaining_capacity(self) -> int:
        """Number of additional bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Output side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the output side without removing them."""
        return bytes(self._buffer[: max(length, 0)])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the output side."""
        count = min(max(length, 0), len(self._buffer))
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the output side."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        return self._input_ended

    def error(self) -> bool:
        return self._error

    def buffer_size(self) -> int:
        """Number of bytes currently available to read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        return not self._buffer

    def eof(self) -> bool:
        """True once the input has ended and every written byte has been read."""
        return self._input_ended and self._bytes_written == self._bytes_read

    # Accounting

    def bytes_written(self) -> int:
        return self._bytes_written

    def bytes_read(self) -> int:
        return self._bytes_read