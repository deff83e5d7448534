"""Byte streams, stream reassembly, buffers, parsing, and POSIX networking wrappers."""

__version__ = "0.1.0"
__all__ = [
    "address",
    "buffer",
    "byte_stream",
    "eventloop",
    "file_descriptor",
    "parser",
    "socket_wrappers",
    "stream_reassembler",
    "tun",
    "util",
]