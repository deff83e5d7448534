# sponge

Building blocks for a user-space TCP stack, in plain Python with no
third-party dependencies.

## What is inside

- `sponge.byte_stream.ByteStream`: a bounded, in-order byte stream. The
  writer side has `write` (returns how many bytes fit), `remaining_capacity`,
  `end_input` and `set_error`; the reader side has `peek_output`,
  `pop_output`, `read`, `buffer_size`, `buffer_empty`, `input_ended`, `eof`
  and `error`. `bytes_written` and `bytes_read` count totals.
- `sponge.stream_reassembler.StreamReassembler`: takes possibly overlapping,
  out-of-order substrings with `push_substring(data, index, eof)` and writes
  the contiguous bytes into the `ByteStream` returned by `stream_out()`.
  Bytes outside a window of `capacity` bytes past the next expected index are
  dropped. `unassembled_bytes()` and `empty()` report what is still waiting.
- `sponge.buffer`: `Buffer`, `BufferList` and `BufferViewList`, byte strings
  that can drop bytes from the front without copying. `BufferList.concatenate`
  joins the pieces; `BufferViewList.as_iovecs` gives a list of `memoryview`s
  for vectored writes.
- `sponge.parser`: `NetParser` reads big-endian `u8`/`u16`/`u32` values from a
  buffer and records a `ParseResult` (such as `PacketTooShort`) instead of
  raising; `unparse_u8`, `unparse_u16` and `unparse_u32` produce the bytes;
  `as_string` names a `ParseResult`.
- `sponge.util`: `InternetChecksum` (incremental one's-complement checksum),
  `format_hexdump` and `hexdump`, `timestamp_ms` (milliseconds since the
  module was imported), `get_random_generator` (a well-seeded
  `random.Random`), and the `TaggedError`/`UnixError` exceptions, both
  subclasses of `OSError`.
- `sponge.address.Address`: an IPv4 address and port, built from a dotted
  quad (`Address("10.0.0.1", 80)`), by name lookup (`Address.from_service`)
  or from an integer (`Address.from_ipv4_numeric`); it converts back with
  `ip()`, `port()`, `ip_port()`, `ipv4_numeric()` and `str()`.
- `sponge.file_descriptor.FileDescriptor`: a shared handle on a kernel file
  descriptor that tracks EOF, closure and read/write counts; `duplicate()`
  shares the descriptor, and it works as a context manager.
- `sponge.socket_wrappers`: `UDPSocket`, `TCPSocket` and `LocalStreamSocket`
  built on `FileDescriptor`, with `bind`, `connect`, `shutdown`,
  `local_address`, `peer_address`, `set_reuseaddr`, and for UDP `recv`
  (returning a `ReceivedDatagram`), `sendto` and `send`; for TCP `listen` and
  `accept`.
- `sponge.tun`: `TunFD` and `TapFD` open an existing persistent Linux TUN or
  TAP device through `/dev/net/tun`.
- `sponge.eventloop.EventLoop`: a `poll`-based loop. `add_rule(fd, direction,
  callback, interest, cancel)` registers a `Rule`; `wait_next_event(timeout_ms)`
  returns a `Result` (`Success`, `Timeout` or `Exit`) and raises
  `RuntimeError` on a polled error or when a callback would make the loop spin.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from sponge.stream_reassembler import StreamReassembler

reassembler = StreamReassembler(65000)
reassembler.push_substring(b"b", 1, True)
reassembler.push_substring(b"a", 0, False)

stream = reassembler.stream_out()
assert stream.read(stream.buffer_size()) == b"ab"
assert stream.eof()
```

```python
from sponge.util import InternetChecksum

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
print(hex(checksum.value()))
```

## What it does not do

The package has the stream and utility layers only. There is no TCP sender,
receiver or connection state machine, no IP or Ethernet header handling, no
network interface or router, and no command-line program. The socket, TUN
and event-loop wrappers need a POSIX system (`select.poll`, `fcntl`), and the
TUN/TAP support is Linux only.