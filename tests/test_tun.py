import errno
import struct
from unittest import mock

import pytest

from sponge import tun
from sponge.tun import TapFD, TunFD, TunTapFD
from sponge.util import UnixError


@pytest.fixture
def fake_clonedev(tmp_path):
    path = tmp_path / "tun"
    path.write_bytes(b"")
    with mock.patch.object(tun, "CLONEDEV", str(path)):
        yield path


def _recording_ioctl(calls):
    def fake_ioctl(fd, request, arg):
        calls.append((fd, request, bytes(arg)))
        return arg

    return fake_ioctl


def test_missing_clone_device_raises_open_error(tmp_path):
    with mock.patch.object(tun, "CLONEDEV", str(tmp_path / "absent")):
        with pytest.raises(UnixError) as info:
            TunFD("tun144")
    assert info.value.attempt == "open"
    assert info.value.errno == errno.ENOENT


def test_ioctl_failure_raises_ioctl_error(fake_clonedev):
    with pytest.raises(UnixError) as info:
        TapFD("tap10")
    assert info.value.attempt == "ioctl"


def test_tun_request_carries_name_and_flags(fake_clonedev):
    calls = []
    with mock.patch("fcntl.ioctl", _recording_ioctl(calls)):
        with TunFD("tun144") as device:
            assert not device.closed()
    assert len(calls) == 1
    _, request, arg = calls[0]
    assert request == 0x400454CA
    name, flags = struct.unpack_from("16sH", arg)
    assert name.rstrip(b"\0") == b"tun144"
    assert flags == 0x1001


def test_tap_request_uses_tap_flag(fake_clonedev):
    calls = []
    with mock.patch("fcntl.ioctl", _recording_ioctl(calls)):
        with TapFD("tap10") as device:
            assert not device.closed()
            assert device.read_count() == 0
    _, _, arg = calls[0]
    assert struct.unpack_from("16sH", arg)[1] == 0x1002


def test_long_device_name_is_truncated_and_terminated(fake_clonedev):
    calls = []
    with mock.patch("fcntl.ioctl", _recording_ioctl(calls)):
        with TunTapFD("x" * 40, True) as device:
            assert not device.closed()
            assert device.write_count() == 0
    _, _, arg = calls[0]
    name = struct.unpack_from("16s", arg)[0]
    assert name == b"x" * 15 + b"\0"
    assert len(arg) == 40
    assert arg[:15] == b"x" * 15