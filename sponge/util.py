"""Errors, randomness, timing, the Internet checksum and hexdumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import TextIO

_PROGRAM_START = time.monotonic()


class TaggedError(OSError):
    """An OSError that also names what was being attempted."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        super().__init__(error_code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A TaggedError for a failed system call."""

    def __init__(self, attempt: str, error_code: int) -> None:
        super().__init__(attempt, error_code, os.strerror(error_code))


def get_random_generator() -> random.Random:
    """A Mersenne Twister generator seeded with a full state's worth of entropy."""
    return random.Random(int.from_bytes(os.urandom(624 * 4), "big"))


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program began."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


class InternetChecksum:
    """The one's-complement Internet checksum, computed incrementally.

    The value is in host order. Summing data that already carries a correct
    checksum yields zero.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: bytes | bytearray | memoryview) -> None:
        """Add bytes to the running sum; chunks may have odd lengths."""
        for byte in bytes(data):
            self._sum = (self._sum + (byte if self._parity else byte << 8)) & 0xFFFFFFFF
            self._parity = not self._parity

    def value(self) -> int:
        """The checksum of everything added so far."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def format_hexdump(data: bytes | bytearray | memoryview, indent: int = 0) -> str:
    """A hexdump of ``data``: 16 bytes per line, offset, hex pairs and ASCII."""
    indent_string = " " * indent
    parts: list[str] = []
    chars = ""
    printed = 0
    for byte in bytes(data):
        if printed & 0xF == 0:
            if printed:
                parts.append(f"    {chars}\n")
                chars = ""
            parts.append(f"{indent_string}{printed:08x}:    ")
        elif printed & 1 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars += _printable(byte)
        printed += 1
    remainder = (16 - (printed & 0xF)) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4))
    parts.append(chars or " ")
    parts.append("\n\n")
    return "".join(parts)


def hexdump(
    data: bytes | bytearray | memoryview, indent: int = 0, file: TextIO | None = None
) -> None:
    """Write a hexdump of ``data`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_hexdump(data, indent))
    out.flush()