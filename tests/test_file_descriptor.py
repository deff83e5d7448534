import errno
import os

import pytest

from sponge.buffer import Buffer, BufferList, BufferViewList
from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = FileDescriptor(read_fd)
    writer = FileDescriptor(write_fd)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_write_then_read(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == 5
    assert reader.read() == b"hello"
    assert writer.write_count() == 1
    assert reader.read_count() == 1
    assert not reader.eof()


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(10) == b"cdef"
    assert reader.read_count() == 2


def test_read_zero_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert not reader.eof()


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.write("bye")
    writer.close()
    assert reader.read() == b"bye"
    assert not reader.eof()
    assert reader.read() == b""
    assert reader.eof()


def test_write_buffer_types(pipe):
    reader, writer = pipe
    bl = BufferList(b"ab")
    bl.append(BufferList(b"cd"))
    total = writer.write(Buffer(b"12")) + writer.write(bl) + writer.write(BufferViewList(b"xy"))
    assert total == 8
    assert reader.read() == b"12abcdxy"


def test_buffer_view_list_not_consumed(pipe):
    reader, writer = pipe
    views = BufferViewList(b"data")
    writer.write(views)
    assert len(views) == 4
    assert reader.read() == b"data"


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    dup = writer.duplicate()
    assert dup.fd_num() == writer.fd_num()
    dup.write(b"x")
    assert writer.write_count() == 1
    dup.close()
    assert writer.closed()
    assert writer.eof()
    assert reader.read() == b"x"


def test_close_twice_raises(pipe):
    _, writer = pipe
    writer.close()
    with pytest.raises(UnixError) as info:
        writer.close()
    assert info.value.errno == errno.EBADF


def test_invalid_fd_number():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_nonblocking_read_on_empty_pipe(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno in (errno.EAGAIN, errno.EWOULDBLOCK)
    assert str(info.value).startswith("read: ")


def test_set_blocking_round_trip(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    assert os.get_blocking(reader.fd_num()) is False
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num()) is True


def test_context_manager_closes():
    read_fd, write_fd = os.pipe()
    os.close(write_fd)
    with FileDescriptor(read_fd) as fd:
        assert fd.fileno() == read_fd
    assert fd.closed()
    assert fd.eof()


def test_write_empty_data(pipe):
    _, writer = pipe
    assert writer.write(b"") == 0
    assert writer.write_count() == 1