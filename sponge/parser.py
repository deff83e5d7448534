"""Parsing and unparsing of network-byte-order integers."""

from __future__ import annotations

import copy
import enum

from .buffer import Buffer


class ParseResult(enum.IntEnum):
    """The result of parsing a datagram, segment, frame or message."""

    NoError = 0
    BadChecksum = 1
    PacketTooShort = 2
    WrongIPVersion = 3
    HeaderTooShort = 4
    TruncatedPacket = 5
    Unsupported = 6


def as_string(result: ParseResult) -> str:
    """A readable name for a ParseResult."""
    return ParseResult(result).name


class NetParser:
    """Reads big-endian integers from a Buffer, recording the first error."""

    def __init__(self, buffer: Buffer | bytes | bytearray) -> None:
        if isinstance(buffer, Buffer):
            self._buffer = copy.copy(buffer)
        else:
            self._buffer = Buffer(buffer)
        self._error = ParseResult.NoError

    def buffer(self) -> Buffer:
        """The bytes not yet parsed."""
        return copy.copy(self._buffer)

    def get_error(self) -> ParseResult:
        return self._error

    def set_error(self, result: ParseResult) -> None:
        self._error = result

    def error(self) -> bool:
        """True if an error has been recorded."""
        return self._error != ParseResult.NoError

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.set_error(ParseResult.PacketTooShort)

    def _parse_int(self, size: int) -> int:
        self._check_size(size)
        if self.error():
            return 0
        value = int.from_bytes(self._buffer.view()[:size], "big")
        self._buffer.remove_prefix(size)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, or record an error if there are not enough."""
        self._check_size(n)
        if self.error():
            return
        self._buffer.remove_prefix(n)


def _unparse_int(value: int, size: int) -> bytes:
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "big")


def unparse_u32(value: int) -> bytes:
    """A 32-bit integer in network byte order."""
    return _unparse_int(value, 4)


def unparse_u16(value: int) -> bytes:
    """A 16-bit integer in network byte order."""
    return _unparse_int(value, 2)


def unparse_u8(value: int) -> bytes:
    """An 8-bit integer as one byte."""
    return _unparse_int(value, 1)