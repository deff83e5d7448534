import copy

import pytest

from sponge.buffer import Buffer, BufferList, BufferViewList


def test_buffer_contents_round_trip():
    buf = Buffer(b"hello world")
    assert bytes(buf) == b"hello world"
    assert buf.copy() == b"hello world"
    assert bytes(buf.view()) == b"hello world"
    assert len(buf) == len(b"hello world")


def test_buffer_accepts_str():
    assert bytes(Buffer("abc")) == b"abc"


def test_buffer_remove_prefix():
    data = b"hello"
    buf = Buffer(data)
    buf.remove_prefix(2)
    assert bytes(buf) == data[2:]
    assert len(buf) == len(data) - 2
    assert buf.at(0) == data[2]


def test_buffer_remove_everything_leaves_empty():
    buf = Buffer(b"abc")
    buf.remove_prefix(3)
    assert len(buf) == 0
    assert bytes(buf) == b""


def test_buffer_remove_prefix_too_large():
    buf = Buffer(b"abc")
    with pytest.raises(IndexError):
        buf.remove_prefix(4)
    assert bytes(buf) == b"abc"


def test_buffer_at_out_of_range():
    buf = Buffer(b"abc")
    with pytest.raises(IndexError):
        buf.at(3)
    assert buf.at(2) == b"abc"[2]


def test_buffer_copies_have_independent_offsets():
    original = Buffer(b"abcdef")
    clone = copy.copy(original)
    clone.remove_prefix(4)
    assert bytes(original) == b"abcdef"
    assert bytes(clone) == b"abcdef"[4:]


def test_bufferlist_concatenate_and_len():
    first = BufferList(b"abc")
    first.append(BufferList(b"defg"))
    assert first.concatenate() == b"abc" + b"defg"
    assert len(first) == len(b"abcdefg")
    assert [bytes(b) for b in first.buffers()] == [b"abc", b"defg"]


def test_bufferlist_remove_prefix_across_buffers():
    blist = BufferList(b"abc")
    blist.append(BufferList(b"defg"))
    blist.remove_prefix(4)
    assert blist.concatenate() == b"abcdefg"[4:]
    assert len(blist.buffers()) == 1


def test_bufferlist_remove_prefix_too_large():
    blist = BufferList(b"ab")
    with pytest.raises(IndexError):
        blist.remove_prefix(3)


def test_bufferlist_append_does_not_alias():
    source = BufferList(b"xyz")
    target = BufferList()
    target.append(source)
    target.remove_prefix(1)
    assert source.concatenate() == b"xyz"
    assert target.concatenate() == b"xyz"[1:]


def test_bufferlist_to_buffer():
    assert len(BufferList().to_buffer()) == 0
    assert bytes(BufferList(b"one").to_buffer()) == b"one"
    two = BufferList(b"one")
    two.append(BufferList(b"two"))
    with pytest.raises(ValueError):
        two.to_buffer()


def test_bufferlist_from_buffer_shares_but_keeps_offset():
    buf = Buffer(b"payload")
    blist = BufferList(buf)
    blist.remove_prefix(3)
    assert bytes(buf) == b"payload"
    assert blist.concatenate() == b"payload"[3:]


def test_bufferviewlist_from_bufferlist():
    blist = BufferList(b"head")
    blist.append(BufferList(b"body"))
    views = BufferViewList(blist)
    assert len(views) == len(blist)
    assert b"".join(bytes(v) for v in views.as_iovecs()) == blist.concatenate()


def test_bufferviewlist_remove_prefix():
    blist = BufferList(b"head")
    blist.append(BufferList(b"body"))
    views = BufferViewList(blist)
    views.remove_prefix(6)
    assert b"".join(bytes(v) for v in views.as_iovecs()) == b"headbody"[6:]
    assert blist.concatenate() == b"headbody"


def test_bufferviewlist_remove_prefix_too_large():
    views = BufferViewList(b"abc")
    with pytest.raises(IndexError):
        views.remove_prefix(4)


def test_bufferviewlist_from_str():
    views = BufferViewList("text")
    assert len(views) == len("text")
    assert bytes(views.as_iovecs()[0]) == b"text"