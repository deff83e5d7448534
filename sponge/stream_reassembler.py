"""Reassembly of possibly out-of-order, overlapping substrings into a byte stream."""

from __future__ import annotations

from .byte_stream import ByteStream


class StreamReassembler:
    """Assembles indexed substrings of a stream into an in-order ByteStream.

    Bytes are stored only within a window of ``capacity`` bytes starting at
    the index of the next byte expected by the output stream; anything
    beyond that window is silently discarded.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._output = ByteStream(capacity)
        self._capacity = capacity
        self._next_index = 0
        # Window relative to _next_index: stored bytes and an occupancy mask.
        self._window = bytearray(capacity)
        self._occupied = bytearray(capacity)
        self._unassembled = 0
        self._eof = False

    def push_substring(self, data: bytes, index: int, eof: bool) -> None:
        """Accept a substring starting at ``index`` and write any newly contiguous bytes."""
        data = bytes(data)
        if not data:
            if eof:
                self._eof = True
            if self._eof and self.empty():
                self._output.end_input()
            return

        first = index
        last = index + len(data) - 1
        window_end = self._next_index + self._capacity
        if first >= window_end or last < self._next_index:
            return

        start = max(first, self._next_index)
        stop = min(last + 1, window_end)
        self._store(data[start - first : stop - first], start - self._next_index)

        if eof:
            self._eof = True

        self._flush()

        if self.empty() and self._eof:
            self._output.end_input()

    def _store(self, chunk: bytes, offset: int) -> None:
        """Place ``chunk`` at window ``offset``, keeping bytes already stored."""
        end = offset + len(chunk)
        pos = offset
        while pos < end:
            gap_start = self._occupied.find(0, pos, end)
            if gap_start < 0:
                break
            gap_end = self._occupied.find(1, gap_start, end)
            if gap_end < 0:
                gap_end = end
            size = gap_end - gap_start
            self._window[gap_start:gap_end] = chunk[gap_start - offset : gap_end - offset]
            self._occupied[gap_start:gap_end] = b"\x01" * size
            self._unassembled += size
            pos = gap_end

    def _flush(self) -> None:
        """Write the contiguous prefix of the window into the output stream."""
        ready = self._occupied.find(0)
        if ready < 0:
            ready = self._capacity
        if ready == 0:
            return
        written = self._output.write(self._window[:ready])
        if written == 0:
            return
        del self._window[:written]
        self._window += bytes(written)
        del self._occupied[:written]
        self._occupied += bytes(written)
        self._unassembled -= written
        self._next_index += written

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def unassembled_bytes(self) -> int:
        """Number of bytes stored but not yet written to the output stream."""
        return self._unassembled

    def empty(self) -> bool:
        """True if no bytes are waiting to be assembled."""
        return self._unassembled == 0